from pydantic import BaseModel
from typing import List


class CategoryDistribution(BaseModel):
    category_id: int
    category: str
    color: str
    count: int


class DashboardStats(BaseModel):
    total_items: int
    low_stock_items: int
    # Current calendar month, in the application timezone
    monthly_inflow: int
    monthly_outflow: int
    monthly_inflow_quantity: int
    monthly_outflow_quantity: int
    category_distribution: List[CategoryDistribution]
