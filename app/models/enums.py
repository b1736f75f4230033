from enum import Enum

class UserRole(str, Enum):
    Admin = "admin"
    Teacher = "teacher"
    Student = "student"
    Staff = "staff"     # employees; rights come from their department

class PermissionAction(str, Enum):
    VIEW_DASHBOARD = "view_dashboard"
    VIEW_USERS = "view_users"
    VIEW_COURSES = "view_courses"
    VIEW_DEPARTMENTS = "view_departments"
    VIEW_SALARY = "view_salary"
    VIEW_ATTENDANCE = "view_attendance"
    APPROVE_USERS = "approve_users"
