"""Single mapping between API field names (camelCase) and storage names (snake_case).

Every persisted field of appointments and admin users appears here exactly
once. Fields whose name is the same in both conventions (``name``,
``status``...) are listed too so the table stays total.

The API layer translates names through ``api_alias`` (the pydantic alias
generator). ``to_storage``/``to_external`` translate whole records and are
kept so the round trip over the table can be checked in tests; nothing in
the request path calls them.
"""

from pydantic.alias_generators import to_camel

FIELD_MAP: dict[str, str] = {
    # appointments
    "id": "id",
    "name": "name",
    "phone": "phone",
    "email": "email",
    "appointmentDate": "appointment_date",
    "appointmentTime": "appointment_time",
    "deviceBrand": "device_brand",
    "deviceModel": "device_model",
    "serviceType": "service_type",
    "serviceLocation": "service_location",
    "address": "address",
    "status": "status",
    "whatsappSent": "whatsapp_sent",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    # admin_users
    "username": "username",
    "passwordHash": "password_hash",
    "role": "role",
}

STORAGE_TO_EXTERNAL: dict[str, str] = {v: k for k, v in FIELD_MAP.items()}

if len(STORAGE_TO_EXTERNAL) != len(FIELD_MAP):
    raise RuntimeError("FIELD_MAP must be one-to-one")


def storage_name(external: str) -> str:
    try:
        return FIELD_MAP[external]
    except KeyError:
        raise KeyError(f"Unknown field: {external}") from None


def external_name(storage: str) -> str:
    """Alias generator for pydantic schemas; also used when rendering rows."""
    try:
        return STORAGE_TO_EXTERNAL[storage]
    except KeyError:
        raise KeyError(f"Unknown column: {storage}") from None


def to_storage(data: dict) -> dict:
    return {storage_name(k): v for k, v in data.items()}


def to_external(data: dict) -> dict:
    return {external_name(k): v for k, v in data.items()}


def api_alias(field: str) -> str:
    """pydantic alias_generator: mapped name for persisted fields, camelCase otherwise."""
    return STORAGE_TO_EXTERNAL.get(field) or to_camel(field)
