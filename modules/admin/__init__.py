"""Admin records: users, consultants, sales channels, clients."""

from .service import ADMIN_ENTITIES, AdminService

__all__ = ['ADMIN_ENTITIES', 'AdminService']
