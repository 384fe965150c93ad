"""Locating reserved handler fields and deriving their binding specs.

A handler declares the input it accepts through three reserved attributes,
``Query``, ``URLParams`` and ``Body``. Each one is a pydantic model, either
assigned on the instance or declared as a class annotation::

    class SearchHandler:
        Query: SearchQuery

        async def handle(self, ctx: Context) -> None: ...

Members of the model are bound from a source key: the field alias when one is
set, the attribute name otherwise. The alias ``"-"`` excludes a member from
binding altogether.
"""

import inspect
from collections.abc import MutableSequence, Sequence
from dataclasses import dataclass
from functools import lru_cache
from types import NoneType, UnionType
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

import pydantic
from pydantic import BaseModel, TypeAdapter
from pydantic.fields import FieldInfo
from starlette.datastructures import UploadFile

from tusk.core.constants import IGNORE
from tusk.core.exceptions import BadFieldError, TypeMismatchError

_SEQUENCE_ORIGINS = (list, Sequence, MutableSequence)


class UnsupportedMemberError(TypeError):
    """A model member has a type that cannot be bound from request data."""


@dataclass(frozen=True, slots=True)
class MemberSpec:
    """How one model member is bound.

    Attributes:
        name: Attribute name on the model
        key: Source key in the query string, path params, form or JSON body
        sequence: Whether every value under ``key`` is bound, in order
        upload: Whether the member receives uploaded files as-is
        target: Readable name of the member type, for error messages
        adapter: Converts raw values to the member type
    """

    name: str
    key: str
    sequence: bool
    upload: bool
    target: str
    adapter: TypeAdapter[Any] | None

    @property
    def ignored(self) -> bool:
        return self.key == IGNORE

    def convert(self, value: object) -> object:
        """Convert a raw value to the member type.

        Raises:
            TypeMismatchError: If the value does not fit the member type.
        """
        if self.upload:
            files = value if isinstance(value, list) else [value]
            if not all(isinstance(item, UploadFile) for item in files):
                raise TypeMismatchError(self.name, self.key, value, self.target)
            return value
        if self.adapter is None:
            return value
        try:
            return self.adapter.validate_python(value)
        except pydantic.ValidationError as exc:
            raise TypeMismatchError(self.name, self.key, value, self.target) from exc


def _strip(annotation: Any) -> Any:  # noqa: ANN401 - arbitrary annotations
    """Drop ``Optional`` and ``Annotated`` wrappers."""
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            annotation = get_args(annotation)[0]
        elif origin in (Union, UnionType):
            args = [arg for arg in get_args(annotation) if arg is not NoneType]
            if len(args) != 1:
                return annotation
            annotation = args[0]
        else:
            return annotation


def _type_name(annotation: Any) -> str:  # noqa: ANN401
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation).replace("typing.", "")


def _member_spec(name: str, field: FieldInfo) -> MemberSpec:
    annotation = field.annotation
    inner = _strip(annotation)
    origin = get_origin(inner)
    args = get_args(inner)

    if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):  # noqa: PLR2004
        msg = f"member '{name}' is a fixed-size tuple; array fields are not supported, use a list"
        raise UnsupportedMemberError(msg)

    sequence = origin is tuple or origin in _SEQUENCE_ORIGINS or inner in (list, tuple)
    item = _strip(args[0]) if sequence and args else inner
    upload = isinstance(item, type) and issubclass(item, UploadFile)

    adapter = None
    if not upload:
        try:
            adapter = TypeAdapter(annotation)
        except pydantic.PydanticSchemaGenerationError as exc:
            msg = f"member '{name}' has a type that cannot be bound: {_type_name(annotation)}"
            raise UnsupportedMemberError(msg) from exc

    return MemberSpec(
        name=name,
        key=field.alias or name,
        sequence=sequence,
        upload=upload,
        target=_type_name(annotation),
        adapter=adapter,
    )


@lru_cache(maxsize=512)
def binding_spec(model_cls: type[BaseModel]) -> tuple[MemberSpec, ...]:
    """Derive the binding spec of a model class.

    Specs are cached per class; building a ``TypeAdapter`` is far more
    expensive than using one.

    Args:
        model_cls: The pydantic model class of a reserved field

    Returns:
        tuple[MemberSpec, ...]: One spec per model field, in declaration order

    Raises:
        UnsupportedMemberError: If a member cannot be bound from request data
    """
    return tuple(
        _member_spec(name, field) for name, field in model_cls.model_fields.items()
    )


def _is_model_class(value: object) -> bool:
    # Parameterized generics such as dict[str, str] are not classes
    return (
        isinstance(value, type)
        and get_origin(value) is None
        and issubclass(value, BaseModel)
    )


def _field_annotation(handler_cls: type, name: str) -> Any:  # noqa: ANN401
    """Return the resolved class annotation of ``name``, or None."""
    try:
        if not any(name in inspect.get_annotations(klass) for klass in handler_cls.__mro__):
            return None
        return get_type_hints(handler_cls)[name]
    except NameError as exc:
        raise BadFieldError(
            name, handler_cls.__name__, f"has an unresolvable annotation ({exc})"
        ) from exc


def _assign(handler: object, name: str, value: BaseModel) -> BaseModel:
    try:
        setattr(handler, name, value)
    except (AttributeError, TypeError, ValueError) as exc:
        raise BadFieldError(name, type(handler).__name__, "is not settable") from exc
    return value


def locate_field(handler: object, name: str) -> BaseModel | None:
    """Find the reserved field ``name`` on a handler instance.

    An annotated but unassigned field is created with ``model_construct`` and
    assigned to the handler, so required members may stay unset until the
    request is bound and validated.

    Args:
        handler: The per-request handler instance
        name: One of the reserved field names

    Returns:
        BaseModel | None: The model to bind into, or None when the handler
            does not accept this input class

    Raises:
        BadFieldError: If the field is not a pydantic model, is frozen, cannot
            be assigned, or has members that cannot be bound
    """
    handler_name = type(handler).__name__
    value = getattr(handler, name, None)

    if value is None or _is_model_class(value):
        model_cls = value or _field_annotation(type(handler), name)
        if model_cls is None:
            return None
        if not _is_model_class(model_cls):
            raise BadFieldError(name, handler_name, "must be a pydantic model")
        value = _assign(handler, name, model_cls.model_construct())
    elif isinstance(value, BaseModel) and getattr(type(handler), name, None) is value:
        # A class-level instance would be shared by concurrent requests
        value = _assign(handler, name, value.model_copy(deep=True))

    if not isinstance(value, BaseModel):
        raise BadFieldError(name, handler_name, "must be a pydantic model")
    if value.model_config.get("frozen"):
        raise BadFieldError(name, handler_name, "is not settable")

    try:
        binding_spec(type(value))
    except UnsupportedMemberError as exc:
        raise BadFieldError(name, handler_name, str(exc)) from exc
    return value
