'''
Encoders/decoders between trees and bytes.

Three formats are supported.
 - `binary`: msgpack
 - `json`: compact JSON with sorted keys
 - `pretty`: indented JSON with sorted keys
All formats represent the same tree, so `decode(encode(node, fmt), fmt) == node`.
'''

from base64 import b64encode, b64decode
import binascii
import zlib

import json
import jsonschema
import msgpack

from tornado.escape import to_unicode, utf8

import logging

from .core import Node
from .errors import CodecError, TypeMismatch
from . import FORMATS

logger = logging.getLogger(__name__)  # pylint: disable=invalid-name

JSON_ENCODERS = {}
JSON_DECODERS = {}

# payloads larger than this are compressed before base-64 encoding
COMPRESS_THRESHOLD = 1024

BYTES_SCHEMA = {
    'type': 'object',
    'properties': {
        '__bytes__': {
            'type': 'object',
            'properties': {
                'data': {
                    'type': 'string'
                },
                'compress': {
                    'type': 'boolean'
                }
            },
            'required': ['data'],
            'additionalProperties': False,
        }
    },
    'required': ['__bytes__'],
    'additionalProperties': False,
}

NODE_SCHEMA = {
    '$schema': 'http://json-schema.org/draft-04/schema#',
    'anyOf': [
        {'type': 'string'},
        BYTES_SCHEMA,
        {
            'type': 'object',
            'additionalProperties': {'$ref': '#'},
            # a lone marker must be a well-formed coded value
            'not': {
                'required': ['__bytes__'],
                'maxProperties': 1,
            },
        },
    ],
}

def _encode_bytes(obj):
    data = bytes(obj)
    out = {}

    if len(data) > COMPRESS_THRESHOLD:
        data = zlib.compress(data)
        out['compress'] = True

    out['data'] = b64encode(data).decode('ascii')
    return {'__bytes__': out}

def _decode_bytes(obj):
    data = b64decode(obj['data'], validate=True)
    if obj.get('compress', False):
        data = zlib.decompress(data)

    return data

# install bytes handlers
JSON_ENCODERS[bytes] = _encode_bytes
JSON_DECODERS['__bytes__'] = _decode_bytes

def _json_encoder(obj):
    try:
        encode = JSON_ENCODERS[type(obj)]
    except KeyError:
        raise TypeError('cannot serialize {}'.format(type(obj)))
    else:
        return encode(obj)

def _is_marker(key):
    # a marker preceded by any number of backslashes
    return key.lstrip('\\') in JSON_DECODERS

def _escape_keys(obj):
    '''
    Prefix keys that look like a marker with a backslash so that no
    container encodes the same as a coded value.
    '''

    if not isinstance(obj, dict):
        return obj

    return {('\\' + k if _is_marker(k) else k): _escape_keys(v) for (k, v) in obj.items()}

def _json_decoder(obj):
    # only a lone marker key is a coded value
    if len(obj) == 1:
        for k in obj.keys():
            if k in JSON_DECODERS:
                return JSON_DECODERS[k](obj[k])

    return {(k[1:] if k.startswith('\\') and _is_marker(k) else k): v for (k, v) in obj.items()}

def json_encode(obj, **kwargs):
    kwargs['default'] = _json_encoder
    return json.dumps(_escape_keys(obj), **kwargs)

def json_decode(data, **kwargs):
    kwargs['object_hook'] = _json_decoder
    return json.loads(to_unicode(data), **kwargs)

def detect(data):
    '''
    Guess the format of `data`.

    JSON trees start with an object or a string and are `pretty` if they
    span several lines. Everything else is assumed to be msgpack.
    '''

    data = data.strip()
    if data[:1] not in (b'{', b'"'):
        return 'binary'
    elif b'\n' in data:
        return 'pretty'
    else:
        return 'json'

def encode(node, fmt='json'):
    '''
    Encode `node` into bytes using format `fmt`.
    '''

    logger.debug('encode: {}'.format(fmt))

    obj = node.to_obj()

    if fmt == 'binary':
        return msgpack.packb(obj, use_bin_type=True)
    elif fmt == 'json':
        return utf8(json_encode(obj, sort_keys=True, separators=(',', ':')))
    elif fmt == 'pretty':
        return utf8(json_encode(obj, sort_keys=True, indent=4))
    else:
        raise ValueError('unknown format: {} (expected one of {})'.format(fmt, ', '.join(FORMATS)))

def decode(data, fmt=None):
    '''
    Decode bytes into a node.

    If `fmt is None`, the format is detected from `data`. Raises
    `CodecError` for malformed input.
    '''

    if fmt is None:
        fmt = detect(data)

    logger.debug('decode: {}'.format(fmt))

    if fmt == 'binary':
        try:
            obj = msgpack.unpackb(data, raw=False)
        except (ValueError, TypeError, msgpack.exceptions.UnpackException) as exc:
            raise CodecError('malformed msgpack: {}'.format(exc))
    elif fmt in ('json', 'pretty'):
        try:
            # validate the document before decoding coded values
            jsonschema.validate(json.loads(to_unicode(data)), NODE_SCHEMA)
            obj = json_decode(data)
        except jsonschema.ValidationError as exc:
            raise CodecError('malformed tree: {}'.format(exc.message))
        except (ValueError, binascii.Error, zlib.error) as exc:
            raise CodecError('malformed JSON: {}'.format(exc))
    else:
        raise ValueError('unknown format: {} (expected one of {})'.format(fmt, ', '.join(FORMATS)))

    try:
        return Node.from_obj(obj)
    except TypeMismatch as exc:
        raise CodecError('malformed tree: {}'.format(exc))
