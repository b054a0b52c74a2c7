# Naming helpers: resource names are derived from the record class names,
# eg. "Post" => "posts", "Category" => "categories"
import inflect

_inflect = inflect.engine()

# Field and type names consisting of one of these are lowercased as a whole
COMMON_INITIALISMS = {
    "API",
    "ASCII",
    "CPU",
    "CSS",
    "DNS",
    "HTML",
    "HTTP",
    "HTTPS",
    "ID",
    "IP",
    "JSON",
    "RAM",
    "RPC",
    "SQL",
    "TTL",
    "UI",
    "UID",
    "UUID",
    "URI",
    "URL",
    "XML",
}


def jsonify(name: str) -> str:
    """
    Convert a python name to its JSON:API member name:
    lowercase the first letter, or the whole name if it's a common initialism
    :param name: class or field name
    :return: JSON:API name
    """
    if not name:
        return ""
    if name in COMMON_INITIALISMS:
        return name.lower()
    return name[0].lower() + name[1:]


def pluralize(name: str) -> str:
    """
    :param name: singular noun, f.i. a class name
    :return: plural form of name
    """
    if not name:
        return ""
    return _inflect.plural_noun(name) or name


def resource_name(type_name: str) -> str:
    """
    :param type_name: record class name, eg. "Post"
    :return: the name of the collection, used to construct the endpoint, eg. "posts"
    """
    # inflect doesn't pluralize capitalized words as common nouns ("Category" => "Categorys")
    return jsonify(pluralize(jsonify(type_name)))


def normalize_prefix(prefix: str) -> str:
    """
    :param prefix: url prefix, eg. "v1", "/v1/"
    :return: prefix with a leading and without a trailing slash, eg. "/v1", or ""
    """
    prefix = (prefix or "").strip("/")
    return f"/{prefix}" if prefix else ""
