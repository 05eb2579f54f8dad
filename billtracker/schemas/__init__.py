"""
Pydantic schemas for request validation.
"""
from .auth_schemas import (
    LoginSchema,
    PasswordChangeSchema,
    ProfileUpdateSchema,
    RegisterSchema,
)
from .bill_schemas import BillCreateSchema, BillPaySchema, BillUpdateSchema
from .category_schemas import CategorySchema
from .document_schemas import DocumentCreateSchema, DocumentUpdateSchema
from .integration_schemas import (
    IntegrationCreateSchema,
    IntegrationSyncSchema,
    IntegrationUpdateSchema,
    SmartAssistantSchema,
)
from .payment_method_schemas import PaymentMethodSchema

__all__ = [
    # Auth schemas
    'RegisterSchema',
    'LoginSchema',
    'ProfileUpdateSchema',
    'PasswordChangeSchema',

    # Bill schemas
    'BillCreateSchema',
    'BillUpdateSchema',
    'BillPaySchema',

    'CategorySchema',
    'PaymentMethodSchema',

    # Document schemas
    'DocumentCreateSchema',
    'DocumentUpdateSchema',

    # Integration schemas
    'IntegrationCreateSchema',
    'IntegrationUpdateSchema',
    'IntegrationSyncSchema',
    'SmartAssistantSchema',
]
