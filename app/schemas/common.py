# app/schemas/common.py


def not_null(value):
    """
    Partial updates leave omitted fields alone, but an explicit null on a
    NOT NULL column is rejected as a validation error (400).
    """
    if value is None:
        raise ValueError("must not be null")
    return value
