from .auth import User, SessionToken
from .people import Employee
from .assets import Category, Asset, AssetHistory
from .requests import AssetRequest

__all__ = [
    'User', 'SessionToken',
    'Employee',
    'Category', 'Asset', 'AssetHistory',
    'AssetRequest',
]
