from enum import Enum

class IdType(str, Enum):
    STUDENT = "STUDENT"
    USER = "USER"
    DEPARTMENT = "DEPARTMENT"
    ATTENDANCE = "ATTENDANCE"
    ACTIVITY_LOG = "ACTIVITY_LOG"

class MealType(str, Enum):
    BREAKFAST = "BREAKFAST"
    LUNCH = "LUNCH"
    DINNER = "DINNER"

class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"

class Gender(str, Enum):
    Male = "Male"
    Female = "Female"

class Capability(str, Enum):
    """Fine-grained permission flags. Values match the User flag columns."""
    ReadDashboard = "can_read_dashboard"
    ScanId = "can_scan_id"
    ReadStudents = "can_read_students"
    WriteStudents = "can_write_students"
    CreateStudents = "can_create_students"
    DeleteStudents = "can_delete_students"
    ExportStudents = "can_export_students"
    ReadAttendance = "can_read_attendance"
    ExportAttendance = "can_export_attendance"
    ReadActivityLog = "can_read_activity_log"
    ReadUsers = "can_read_users"
    WriteUsers = "can_write_users"
    ReadDepartments = "can_read_departments"
    WriteDepartments = "can_write_departments"
    ManageSiteSettings = "can_manage_site_settings"
    SeeAllRecords = "can_see_all_records"
