from kvshortener.models.mapping_record import MappingRecord
from kvshortener.models.record_codec import encode_record, decode_record


__all__ = [
    'MappingRecord',
    'encode_record',
    'decode_record',
]
