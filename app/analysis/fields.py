from enum import Enum


class FieldName(str, Enum):
    """Closed set of fields extracted from insurance documents."""

    CPF = "cpf"
    NOME = "nome"
    ENDERECO = "endereco"
    TELEFONE = "telefone"
    EMAIL = "email"
    CHASSI = "chassi"
    MARCA = "marca"
    MODELO = "modelo"
    PLACA = "placa"
    ANO = "ano"
    COR = "cor"


PERSONAL_FIELDS: tuple[FieldName, ...] = (
    FieldName.CPF,
    FieldName.NOME,
    FieldName.ENDERECO,
    FieldName.TELEFONE,
    FieldName.EMAIL,
)

VEHICLE_FIELDS: tuple[FieldName, ...] = (
    FieldName.CHASSI,
    FieldName.MARCA,
    FieldName.MODELO,
    FieldName.PLACA,
    FieldName.ANO,
    FieldName.COR,
)

FieldValues = dict[FieldName, str | None]


def empty_fields(names: tuple[FieldName, ...]) -> FieldValues:
    return {name: None for name in names}


def coerce_value(raw: object) -> str | None:
    """Turn a provider-supplied field value into a trimmed string or None."""
    if raw is None or isinstance(raw, (dict, list)):
        return None
    text = str(raw).strip()
    if not text or text.lower() in {"null", "none"}:
        return None
    return text


def build_fields(raw: object, names: tuple[FieldName, ...]) -> FieldValues:
    """Build a complete field map from a provider JSON object.

    Unknown keys are ignored and missing keys become None.
    """
    fields = empty_fields(names)
    if not isinstance(raw, dict):
        return fields
    for name in names:
        fields[name] = coerce_value(raw.get(name.value))
    return fields
