"""Index templates for the user, account and asset indexes"""
from typing import Any, Dict, List, NamedTuple

from provision.store.base import IDX_ACCOUNT, IDX_ASSET, IDX_USER

_KEYWORD = {"type": "keyword"}
_TEXT = {"type": "text"}
_BOOLEAN = {"type": "boolean"}


class IndexTemplate(NamedTuple):
    name: str
    template: Dict[str, Any]


def _template(prefix: str, kind: str, properties: Dict[str, Any]) -> IndexTemplate:
    return IndexTemplate(
        name=f"{prefix}{kind}",
        template={
            "index_patterns": [f"{prefix}{kind}"],
            "settings": {"number_of_shards": 5},
            "mappings": {
                "_source": {"enabled": True},
                "properties": properties,
            },
        },
    )


def user_template(prefix: str) -> IndexTemplate:
    return _template(prefix, IDX_USER, {
        "id": _KEYWORD,
        "description": _TEXT,
        "display_name": _TEXT,
        "active": _BOOLEAN,
        "sysop": _BOOLEAN,
        "password": {"type": "keyword", "index": False},
        "sections": _KEYWORD,
        "sections_all": _BOOLEAN,
        "accounts": _KEYWORD,
        "admin_accounts": _KEYWORD,
    })


def account_template(prefix: str) -> IndexTemplate:
    return _template(prefix, IDX_ACCOUNT, {
        "id": _KEYWORD,
        "parent": _KEYWORD,
        "description": _TEXT,
        "display_name": _TEXT,
        "active": _BOOLEAN,
        "modules": _KEYWORD,
        "org_id": {"type": "integer"},
        "access_keys": {
            "properties": {
                "name": _KEYWORD,
                "description": _TEXT,
                "key": {"type": "keyword", "index": False},
                "active": _BOOLEAN,
            },
        },
    })


def asset_template(prefix: str) -> IndexTemplate:
    return _template(prefix, IDX_ASSET, {
        "id": _KEYWORD,
        "description": _TEXT,
        "display_name": _TEXT,
        "asset_class": _KEYWORD,
        "asset_cfg": _TEXT,
        "active": _BOOLEAN,
        "routes": {
            "properties": {
                "account_id": _KEYWORD,
                "model_id": _KEYWORD,
                "type": _KEYWORD,
            },
        },
    })


def index_templates(prefix: str) -> List[IndexTemplate]:
    return [user_template(prefix), account_template(prefix), asset_template(prefix)]
