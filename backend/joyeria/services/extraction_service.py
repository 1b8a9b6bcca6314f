"""
Rule-based product field extraction from free Spanish text.

Example: "Anillo de oro 18k, se compró en 300, se vende en 800, 2 piezas".

Each field is filled by the first rule in RULES whose pattern matches; the
rule's transform turns the first capture group into the field value. There is
no model behind this, only the ordered rules below.
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable

from joyeria.errors import ErrorType
from joyeria.exceptions import AppException
from joyeria.schemas.extraction import ExtractResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionRule:
    field: str
    pattern: re.Pattern
    transform: Callable[[str], Any]


def _rule(field: str, pattern: str, transform: Callable[[str], Any] = str.strip) -> ExtractionRule:
    return ExtractionRule(field, re.compile(pattern, re.IGNORECASE), transform)


def parse_price(raw: str) -> float:
    return float(raw.replace(",", ""))


def clean_supplier(raw: str) -> str:
    supplier = re.sub(r"\$\d+.*$", "", raw.strip()).strip()
    return re.sub(r"^(de|del|la|el|comprado|compramos|a)\s+", "", supplier, flags=re.IGNORECASE).strip()


RULES: list[ExtractionRule] = [
    _rule("name", r"(?:nombre|producto):?\s*([^\n,]+)"),
    _rule(
        "purchase_price",
        r"(?:se\s+compr[óo]\s+en|compr[óo]\s+en|compramos|compré|precio\s*compra|costó|cost[óo]|pagamos)"
        r"\s*\$?(\d+(?:[.,]\d+)?)",
        parse_price,
    ),
    _rule(
        "sale_price",
        r"(?:se\s+vende\s+en|vende\s+en|vendemos|vendo|precio\s*venta|vender|vend[eo]mos?\s+en)"
        r"\s*\$?(\d+(?:[.,]\d+)?)",
        parse_price,
    ),
    _rule("category", r"(?:categoría|tipo|clase):?\s*([^\n,]+)"),
    _rule(
        "supplier",
        r"(?:proveedor|vendedor|comprado\s+a|compramos\s+a|de\s+la\s+tienda|tienda)\s*:?\s*([^\n,]+)",
        clean_supplier,
    ),
    _rule("stock", r"(?:stock|cantidad|unidades|piezas)\s*(?:de|:)?\s*(\d+)", int),
    _rule("stock", r"(?:hay|tenemos|disponibles?|existen)\s+(\d+)\s*(?:unidades|piezas|productos?)?", int),
    _rule("stock", r"(\d+)\s*(?:unidades|piezas|productos?|en\s+stock)", int),
]

# Trailing price talk that leaks into a name taken from the first segment
NAME_NOISE = re.compile(r"(?:compramos|compré|compró|vendemos|vendo|precio).*$", re.IGNORECASE)

# (keywords, category), first match on the lowercased name wins
CATEGORY_KEYWORDS: list[tuple[tuple[str, ...], str]] = [
    (("anillo", "ring"), "Anillos"),
    (("collar", "necklace"), "Collares"),
    (("arete", "pendiente", "earring"), "Aretes"),
    (("pulsera", "brazalete", "bracelet"), "Pulseras"),
    (("cadena", "chain"), "Cadenas"),
    (("reloj", "watch"), "Relojes"),
    (("dije", "charm"), "Dijes"),
    (("piercing",), "Piercings"),
]
DEFAULT_CATEGORY = "Joyeria"
DEFAULT_NAME = "Producto"

SILVER_GRADES = {"925", "950", "999"}


def apply_rules(text: str, rules: list[ExtractionRule] = RULES) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for rule in rules:
        if rule.field in fields:
            continue
        match = rule.pattern.search(text)
        if match:
            fields[rule.field] = rule.transform(match.group(1))
    return fields


def infer_category(name: str) -> str:
    lowered = name.lower()
    for keywords, category in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def detect_materials(name: str) -> list[str]:
    lowered = name.lower()
    materials = []
    if "oro" in lowered or "gold" in lowered:
        materials.append("oro")
        karats = re.search(r"(\d+)k|(\d+)\s*quilates?", lowered)
        if karats:
            materials.append(f"{karats.group(1) or karats.group(2)} quilates")
    if "plata" in lowered or "silver" in lowered:
        materials.append("plata")
        grade = re.search(r"(\d{3})", lowered)
        if grade and grade.group(1) in SILVER_GRADES:
            materials.append(f"{grade.group(1)} de ley")
    if "diamante" in lowered or "diamond" in lowered:
        materials.append("con diamantes")
    if "piedra" in lowered or "gem" in lowered:
        materials.append("con piedras preciosas")
    return materials


def generate_description(name: str, category: str | None = None) -> str:
    materials = detect_materials(name)
    joined = " y ".join(materials)
    of_materials = f" de {joined}" if materials else ""
    category = (category or "").lower()

    if "anillo" in category:
        text = (
            f"Hermoso anillo{of_materials}, diseño elegante y sofisticado. "
            "Ideal para ocasiones especiales o uso diario. "
            "Talla estándar, puede ajustarse según necesidad. "
        )
    elif "collar" in category:
        text = (
            f"Elegante collar{of_materials}, perfecto para complementar cualquier atuendo. "
            "Largo ajustable, diseño versátil que se adapta a diferentes estilos. "
            "Presentación en estuche original. "
        )
    elif "arete" in category or "pendiente" in category:
        text = (
            f"Deslumbrantes aretes{of_materials}, diseño llamativo y moderno. "
            "Cómodos para uso prolongado, cierre seguro. "
            "Ideales para destacar en cualquier ocasión. "
        )
    elif "pulsera" in category:
        text = (
            f"Hermosa pulsera{of_materials}, diseño único y exclusivo. "
            "Ajustable a diferentes tamaños de muñeca. "
            "Perfecta para combinar con otras piezas de joyería. "
        )
    elif "reloj" in category:
        text = (
            f"Reloj{of_materials}, diseño clásico y funcional. "
            "Resistente al agua, garantía incluida. "
            "Correa ajustable, mecanismo de precisión. "
        )
    else:
        in_materials = f" en {joined}" if materials else ""
        text = (
            f"Pieza de joyería{in_materials}, diseño excepcional y calidad premium. "
            "Artesanía cuidadosa que garantiza durabilidad y elegancia. "
            "Ideal como regalo o adquisición personal. "
        )

    text += "Mantiene su brillo y belleza con el cuidado adecuado."
    return text.strip()


def extract_product_info(text: str | None) -> ExtractResponse:
    if not text or not text.strip():
        raise AppException(ErrorType.BAD_REQUEST, "Text is required")

    fields = apply_rules(text)

    name = fields.get("name") or re.split(r"[,\n]", text)[0].strip()
    name = NAME_NOISE.sub("", name).strip()
    category = fields.get("category") or infer_category(name)
    supplier = fields.get("supplier") or None

    logger.debug(f"Extracted fields: {sorted(fields)}")
    return ExtractResponse(
        name=name or DEFAULT_NAME,
        category=category,
        description=generate_description(name, category),
        purchase_price=fields.get("purchase_price"),
        sale_price=fields.get("sale_price"),
        stock=fields.get("stock"),
        supplier=supplier,
    )
