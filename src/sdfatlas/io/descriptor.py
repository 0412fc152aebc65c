"""BMFont descriptor serialization.

Two descriptor formats are supported:
- xml: the AngelCode BMFont XML layout, plus a distanceField element
- json: the layout read by load-bmfont, plus a distanceField object

See https://www.angelcode.com/products/bmfont/doc/file_format.html
"""

import json
import xml.etree.ElementTree as etree
from typing import Any

from sdfatlas.config.settings import OutputType

# Attributes that stay strings when parsing XML
_STRING_KEYS = frozenset({"face", "charset", "char", "file", "fieldType"})

# Attributes holding comma-separated lists
_LIST_KEYS = frozenset({"padding", "spacing"})

DESCRIPTOR_EXTENSIONS = {
    OutputType.XML: ".fnt",
    OutputType.JSON: ".json",
}


def _to_str(value: Any) -> str:
    """Convert a descriptor value to an XML attribute string."""
    if isinstance(value, (list, tuple)):
        return ",".join(_to_str(item) for item in value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _from_str(key: str, value: str) -> Any:
    """Convert an XML attribute string back to a descriptor value."""
    if key in _STRING_KEYS:
        return value
    if key in _LIST_KEYS:
        return [_from_str("", item) for item in value.split(",")]
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def _attributes(values: dict[str, Any]) -> dict[str, str]:
    return {key: _to_str(value) for key, value in values.items()}


def _parse_attributes(element: etree.Element) -> dict[str, Any]:
    return {key: _from_str(key, value) for key, value in element.attrib.items()}


def _to_xml(data: dict[str, Any]) -> str:
    info = dict(data["info"])
    info["charset"] = "".join(info["charset"])

    root = etree.Element("font")
    etree.SubElement(root, "info", _attributes(info))
    etree.SubElement(root, "common", _attributes(data["common"]))
    pages = etree.SubElement(root, "pages")
    for page_id, filename in enumerate(data["pages"]):
        etree.SubElement(pages, "page", {"id": str(page_id), "file": filename})
    etree.SubElement(root, "distanceField", _attributes(data["distanceField"]))
    chars = etree.SubElement(root, "chars", {"count": str(len(data["chars"]))})
    for char in data["chars"]:
        etree.SubElement(chars, "char", _attributes(char))
    kernings = etree.SubElement(root, "kernings", {"count": str(len(data["kernings"]))})
    for kerning in data["kernings"]:
        etree.SubElement(kernings, "kerning", _attributes(kerning))

    etree.indent(root, space="  ")
    return '<?xml version="1.0"?>\n' + etree.tostring(root, encoding="unicode") + "\n"


def _from_xml(text: str) -> dict[str, Any]:
    root = etree.fromstring(text)
    if root.tag != "font":
        raise ValueError(f"Not a BMFont XML document: root is <{root.tag}>")

    info = _parse_attributes(root.find("info"))
    info["charset"] = list(info.get("charset", ""))
    pages = sorted(root.find("pages").iterfind("page"), key=lambda page: int(page.get("id")))
    kernings = root.find("kernings")

    return {
        "pages": [page.get("file") for page in pages],
        "chars": [_parse_attributes(char) for char in root.find("chars").iterfind("char")],
        "info": info,
        "common": _parse_attributes(root.find("common")),
        "distanceField": _parse_attributes(root.find("distanceField")),
        "kernings": (
            [_parse_attributes(kerning) for kerning in kernings.iterfind("kerning")]
            if kernings is not None
            else []
        ),
    }


def serialize_descriptor(data: dict[str, Any], output_type: OutputType) -> str:
    """Serialize a descriptor dictionary.

    Args:
        data: Descriptor in the BMFont JSON layout (FontDescriptor.to_dict())
        output_type: Target format

    Returns:
        Descriptor text
    """
    if output_type == OutputType.JSON:
        return json.dumps(data, ensure_ascii=False)
    return _to_xml(data)


def parse_descriptor(text: str, output_type: OutputType) -> dict[str, Any]:
    """Parse descriptor text back into the BMFont JSON layout.

    Args:
        text: Descriptor text
        output_type: Format of the text

    Returns:
        Descriptor dictionary

    Raises:
        ValueError: If the text is not a BMFont descriptor
    """
    if output_type == OutputType.JSON:
        return json.loads(text)
    return _from_xml(text)
