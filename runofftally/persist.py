'''Serialization of Runofftally objects to JSON-ready dictionaries and back.

Tally results, ballots, candidates and configured tally engines all provide
a ``to_dict()`` method (mostly courtesy of the :func:`simple_serialization`
decorator) that produces a structure of dictionaries, lists and atomic values
that the standard :mod:`json` module can write. :func:`from_dict` reverses
the process, which allows e.g. storing an engine setup in a configuration
file or archiving the result of a poll.

Values that JSON cannot represent natively are stored as typed objects::

    {'type': 'Decimal', 'value': '37.5'}
    {'type': 'tuple', 'value': [1, 2]}
    {'type': 'dict', 'keys': [1, 2], 'values': [...]}

and library objects as ``{'class': 'runofftally.module.Class', ...}`` with
their constructor parameters alongside. Only classes from the ``runofftally``
namespace can be restored.
'''

import sys
import json
import inspect
import importlib
from decimal import Decimal
from typing import Any, List, Dict, Callable


PACKAGE_NAME = 'runofftally'

# keys with a special meaning in serialized dicts
RESERVED_KEYS = frozenset(['class', 'type'])


def simple_serialization(class_: type) -> type:
    '''A decorator to provide a simple to_dict() serialization method.

    The resulting method will serialize all object attributes corresponding
    to the class's constructor parameter names, or to the names listed in
    the ``serialize_params`` class attribute if there is one. Therefore, this
    decorator is only useful when the class exposes all its original
    parameters in a form acceptable to its constructor.

    :param class_: The class to add the method to.
    '''
    if hasattr(class_, 'serialize_params'):
        param_names = list(class_.serialize_params)
    else:
        param_names = [
            name for name in inspect.signature(class_.__init__).parameters
            if name != 'self'
        ]

    def to_dict(self) -> Dict[str, Any]:
        out_dict = {'class': scoped_class_name(self)}
        for attr in param_names:
            out_dict[attr] = serialize_value(getattr(self, attr))
        return out_dict

    class_.to_dict = to_dict
    return class_


def serialize_value(value: Any) -> Any:
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    elif isinstance(value, tuple(ATOMIC_TYPES)):
        return value
    elif type(value) in CONVERTIBLE_TYPES:
        return CONVERTIBLE_TYPES[type(value)](value)
    elif hasattr(value, 'items') and hasattr(value, 'keys'):
        plain_keys = (
            all(isinstance(key, str) for key in value.keys())
            and not RESERVED_KEYS.intersection(value.keys())
        )
        if plain_keys:
            return {key: serialize_value(val) for key, val in value.items()}
        else:
            return {
                'type': 'dict',
                'keys': [serialize_value(key) for key in value.keys()],
                'values': [serialize_value(val) for val in value.values()],
            }
    elif isinstance(value, list):
        return [serialize_value(val) for val in value]
    else:
        raise ValueError(f'cannot serialize {value!r} to dict format')


def deserialize_value(value: Any) -> Any:
    if isinstance(value, dict):
        if isinstance(value.get('type'), str) and value['type'] in VALUE_TYPES:
            return deserialize_typed(value)
        elif 'class' in value:
            return deserialize_class(value)
        else:
            return {key: deserialize_value(val) for key, val in value.items()}
    elif isinstance(value, tuple(ATOMIC_TYPES)):
        return value
    elif isinstance(value, list):
        return [deserialize_value(val) for val in value]
    else:
        raise ValueError(f'cannot deserialize {value!r}, type unknown')


def deserialize_typed(typedef: Dict[str, Any]) -> Any:
    typeobj = VALUE_TYPES[typedef['type']]
    if typeobj is dict:
        return dict(zip(
            [deserialize_value(key) for key in typedef['keys']],
            [deserialize_value(val) for val in typedef['values']]
        ))
    elif 'value' in typedef:
        return typeobj(deserialize_value(typedef['value']))
    else:
        raise ValueError(f'invalid typed value contents: {typedef!r}')


def deserialize_class(clsdef: Dict[str, Any]) -> Any:
    cls = get_class(clsdef['class'])
    params = {
        key: deserialize_value(val)
        for key, val in clsdef.items()
        if key != 'class'
    }
    if hasattr(cls, 'from_dict'):
        return cls.from_dict(params)
    else:
        return cls(**params)


def get_class(identifier: Any) -> type:
    '''Resolve a scoped class name from the library namespace.

    :raises ValueError: If the identifier is malformed or points outside
        the library.
    '''
    if not is_scoped_identifier(identifier):
        raise ValueError(f'invalid runofftally class def: {identifier!r}')
    module, name = identifier.rsplit('.', 1)
    if module != PACKAGE_NAME and not module.startswith(PACKAGE_NAME + '.'):
        raise ValueError(f'refusing to load class outside {PACKAGE_NAME}:'
                         f' {identifier!r}')
    if module not in sys.modules:
        importlib.import_module(module)
    try:
        cls = getattr(sys.modules[module], name)
    except AttributeError as e:
        raise ValueError(f'unknown runofftally class: {identifier!r}') from e
    if not isinstance(cls, type):
        raise ValueError(f'not a class: {identifier!r}')
    return cls


def from_dict(value: Dict[str, Any]) -> Any:
    '''Restore a Runofftally object from a JSON-like dictionary.

    :param value: A dictionary created by :func:`to_dict`.
    '''
    if not isinstance(value, dict):
        raise ValueError('invalid runofftally object def: dict expected,'
                         f' got {value!r}')
    elif 'class' not in value:
        raise ValueError('invalid runofftally object def:'
                         ' must have a class key')
    else:
        return deserialize_value(value)


def to_dict(obj: Any) -> Dict[str, Any]:
    '''Serialize a Runofftally object to a JSON-ready dictionary.

    :param obj: A tally engine, result, ballot or similar. It should provide
        a `to_dict()` method.
    '''
    return serialize_value(obj)


def dumps(obj: Any, **kwargs) -> str:
    '''Serialize a Runofftally object to a JSON string.

    Keyword arguments are passed to :func:`json.dumps`.
    '''
    return json.dumps(to_dict(obj), **kwargs)


def loads(text: str) -> Any:
    '''Restore a Runofftally object from a JSON string.'''
    return from_dict(json.loads(text))


def is_scoped_identifier(value: Any) -> bool:
    return (
        isinstance(value, str)
        and '.' in value
        and all(chunk.isidentifier() for chunk in value.split('.'))
    )


def scoped_class_name(value: Any) -> str:
    cls = value.__class__
    return '.'.join((cls.__module__, cls.__name__))


def decimal_to_json(d: Decimal) -> Dict[str, Any]:
    return {'type': 'Decimal', 'value': str(d)}


def sequence_to_json_factory(typeobj: type) -> Callable[[Any], Dict[str, Any]]:
    typename = typeobj.__name__

    def sequence_to_json(seq) -> Dict[str, Any]:
        return {'type': typename, 'value': [serialize_value(v) for v in seq]}

    return sequence_to_json


ATOMIC_TYPES: List[type] = [
    str, int, float, bool, type(None),
]

CONVERTIBLE_TYPES: Dict[type, Callable] = {
    Decimal: decimal_to_json,
}

SEQUENCE_TYPES: List[type] = [frozenset, tuple]

for seqtype in SEQUENCE_TYPES:
    CONVERTIBLE_TYPES[seqtype] = sequence_to_json_factory(seqtype)

VALUE_TYPES: Dict[str, type] = {
    'Decimal': Decimal,
    'dict': dict,
    'frozenset': frozenset,
    'tuple': tuple,
}
