# sitehire/models/admin.py
from pydantic import BaseModel

class DashboardStats(BaseModel):
    total_users: int
    active_drivers: int
    completed_orders: int
    total_revenue: float
