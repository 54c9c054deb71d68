# /app/database/models.py

from enum import Enum

TABLES = {
    'PROFILES': 'profiles',
    'STAFF': 'staff',
    'STAFF_LEAVES': 'staff_leaves',
    'MENU_ITEMS': 'menu_items',
}


class StaffPosition(str, Enum):
    WAITER = "waiter"
    CHEF = "chef"
    MANAGER = "manager"
    HOST = "host"


class StaffShift(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MenuCategory(str, Enum):
    MAIN_COURSE = "Main Course"
    APPETIZERS = "Appetizers"
    DESSERTS = "Desserts"
    BEVERAGES = "Beverages"
    NON_VEG = "Non-Veg"
    OTHER = "Other"
