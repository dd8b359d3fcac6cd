"""Identity module: users, their role and role profiles."""

from .models import Identity, Role
from .repository import IdentityRepository

__all__ = ['Identity', 'IdentityRepository', 'Role']
