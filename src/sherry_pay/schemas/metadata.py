"""
Intent Metadata Schema Models

Pydantic models describing the declarative action descriptor ("mini-app
metadata") that a Sherry-style renderer turns into forms. The server never
renders anything itself; it only builds a descriptor and validates it with
:func:`create_metadata` before returning it.

Descriptor shape (JSON, camelCase):

    {
      "url": "...", "icon": "...", "title": "...", "description": "...",
      "baseUrl": "...",
      "actions": [
        {
          "type": "dynamic", "label": "...", "chains": {"source": "fuji"},
          "path": "/api/gateway",
          "params": [{"name": "...", "label": "...", "type": "select",
                      "required": true, "options": [{"label": "...", "value": "..."}]}]
        }
      ]
    }
"""

from typing import Annotated, List, Literal, Optional, Union
from urllib.parse import urlparse

from pydantic import Field, ValidationError

from .bases import CanonicalModel
from ..engine.exceptions import MetadataValidationError


#: Chain names a descriptor may reference in ``chains.source`` / ``destination``.
SUPPORTED_CHAINS = frozenset({
    "fuji",
    "avalanche",
    "celo",
    "alfajores",
    "monad-testnet",
    "ethereum",
    "sepolia",
})

#: Renderers show at most this many actions per mini-app.
MAX_ACTIONS = 4


class SelectOption(CanonicalModel):
    """One selectable choice of a ``select`` or ``radio`` parameter."""

    label: str = Field(..., min_length=1)
    value: Union[str, int, float, bool]
    description: Optional[str] = None


class ChainContext(CanonicalModel):
    """Source (and optional destination) chain of an action."""

    source: str
    destination: Optional[str] = None


class TextParameter(CanonicalModel):
    """Free-form input rendered as a text-like field."""

    name: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    type: Literal["text", "number", "address", "email", "url", "textarea"] = "text"
    required: bool = False
    description: Optional[str] = None
    value: Optional[str] = None


class SelectParameter(CanonicalModel):
    """Parameter restricted to a fixed list of options."""

    name: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    type: Literal["select", "radio"] = "select"
    required: bool = False
    description: Optional[str] = None
    options: List[SelectOption] = Field(default_factory=list)


ActionParameter = Annotated[Union[TextParameter, SelectParameter], Field(discriminator="type")]


class DynamicAction(CanonicalModel):
    """
    Action whose transaction is computed by the server.

    The renderer submits the collected parameters to ``path`` (relative to the
    descriptor's ``baseUrl``) and expects ``{serializedTransaction, chainId}``
    or a creation confirmation back.
    """

    type: Literal["dynamic"] = "dynamic"
    label: str = Field(..., min_length=1)
    description: Optional[str] = None
    chains: ChainContext
    path: str
    params: List[ActionParameter] = Field(default_factory=list)


class Metadata(CanonicalModel):
    """Top-level mini-app descriptor."""

    url: str
    icon: str
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    base_url: Optional[str] = Field(default=None, alias="baseUrl")
    actions: List[DynamicAction] = Field(default_factory=list)


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _rule_violations(metadata: Metadata) -> List[str]:
    problems: List[str] = []

    if not _is_http_url(metadata.url):
        problems.append(f"url must be an http(s) URL, got {metadata.url!r}")
    if not _is_http_url(metadata.icon):
        problems.append(f"icon must be an http(s) URL, got {metadata.icon!r}")
    if metadata.base_url is not None and not _is_http_url(metadata.base_url):
        problems.append(f"baseUrl must be an http(s) URL, got {metadata.base_url!r}")

    if not 1 <= len(metadata.actions) <= MAX_ACTIONS:
        problems.append(f"metadata must define between 1 and {MAX_ACTIONS} actions, got {len(metadata.actions)}")

    for index, action in enumerate(metadata.actions):
        where = f"actions[{index}]"
        if not action.path.startswith("/"):
            problems.append(f"{where}.path must start with '/', got {action.path!r}")
        for chain in (action.chains.source, action.chains.destination):
            if chain is not None and chain not in SUPPORTED_CHAINS:
                problems.append(f"{where}.chains references unsupported chain {chain!r}")

        seen_names = set()
        for param in action.params:
            if param.name in seen_names:
                problems.append(f"{where} declares parameter {param.name!r} more than once")
            seen_names.add(param.name)

            if isinstance(param, SelectParameter):
                values = [option.value for option in param.options]
                if len(values) != len(set(values)):
                    problems.append(f"{where}.{param.name} has duplicate option values")

    return problems


def create_metadata(metadata: Union[Metadata, dict]) -> Metadata:
    """
    Validate a descriptor and return it as a :class:`Metadata` instance.

    Args:
        metadata: A ``Metadata`` model or a plain dict in wire (camelCase) or
            Python (snake_case) form.

    Returns:
        Metadata: The validated descriptor.

    Raises:
        MetadataValidationError: On schema errors or rule violations.
    """
    try:
        if isinstance(metadata, Metadata):
            validated = Metadata.model_validate(metadata.model_dump(by_alias=True))
        else:
            validated = Metadata.model_validate(metadata)
    except ValidationError as e:
        raise MetadataValidationError(f"Invalid metadata: {e}") from e

    problems = _rule_violations(validated)
    if problems:
        raise MetadataValidationError("Invalid metadata: " + "; ".join(problems))

    return validated
