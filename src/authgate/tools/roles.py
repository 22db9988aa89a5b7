"""Application role names and the groups tools commonly require."""

ADMIN = "Admin"
SALES = "Sales"
CUSTOMER_SERVICE = "CustomerService"
READ_ONLY = "ReadOnly"

ALL_BUSINESS_ROLES = frozenset({ADMIN, SALES, CUSTOMER_SERVICE, READ_ONLY})
CUSTOMER_DATA_ROLES = frozenset({ADMIN, SALES, CUSTOMER_SERVICE})
SENSITIVE_OPERATION_ROLES = frozenset({ADMIN})
