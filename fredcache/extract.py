"""
Pulls named fields out of repeated records in a FRED response body.

This is not an XML parser. It assumes the caller knows the shape of the
document: records are identified by tag name, do not nest, and contain the
requested fields in the order the caller lists them. Each record is handled in
two phases. First its bounds are found, then the fields are searched for one
after another, each search starting where the previous match ended. A field
is either an attribute of the record's opening tag,

```xml
<observation realtime_start="2025-10-04" date="1971-04-01" value="0.850603488248666"/>
```

or a leaf element inside the record,

```xml
<observation><date>1971-04-01</date><value>0.850603488248666</value></observation>
```

Values are returned as the raw text between the quotes or tags. There is no
type conversion and no unescaping of entities such as `&amp;`; callers who need
either must do it themselves. Because the scan only moves forward, declaring
the fields in a different order from the document makes the out-of-order field
come back as `FieldNotFound`.
"""

import logging
import re
from typing import List, Sequence

from .errors import ExtractError, FieldNotFound, UndecodableField, UnterminatedRecord


logger = logging.getLogger(__name__)

# Everything after the tag name up to and including the closing ">" of an
# opening tag. Quoted attribute values may contain ">".
_OPENING_TAG_REST = re.compile(rb'(?:"[^"]*"|\'[^\']*\'|[^"\'>])*>')


def _field_pattern(name: bytes) -> 're.Pattern[bytes]':
    name = re.escape(name)
    attribute = rb'(?<![\w.:-])' + name + rb'\s*=\s*(?:"([^"]*)"|\'([^\']*)\')'
    element = (rb'<' + name + rb'(?=[\s/>])(?:"[^"]*"|\'[^\']*\'|[^"\'>/])*'
               + rb'(?:/>|>([^<]*)</' + name + rb'\s*>)')
    return re.compile(attribute + rb'|' + element)


class FieldIter:
    """
    Iterates over the records of a response, producing one list of field
    values per record.

    `next()` raises `StopIteration` once no further record starts, and keeps
    doing so afterwards. It raises an `ExtractError` subclass for a record
    that lacks a field or cannot be decoded; the iterator has already moved
    past that record, so the caller may catch the error and carry on. An
    unterminated record ends the iteration.

    The iterator is not safe to advance from several threads at once.
    """

    def __init__(self, tag: str, fields: Sequence[str], buffer: bytes, encoding: str = 'utf-8') -> None:
        """
        @param tag
          The tag name of a record, e.g. "observation".
        @param fields
          The field names to extract, in the order they appear in each record.
        @param buffer
          The response body. It is scanned in place, not copied.
        """
        if not fields:
            raise ValueError('At least one field is required')

        self.__tag = tag
        self.__fields = tuple(fields)
        self.__buffer = buffer
        self.__encoding = encoding
        self.__position = 0
        self.__done = False

        encoded_tag = re.escape(tag.encode(encoding))
        self.__record_start = re.compile(rb'<' + encoded_tag + rb'(?=[\s/>])')
        self.__record_end = re.compile(rb'</' + encoded_tag + rb'\s*>')
        self.__field_patterns = [_field_pattern(field.encode(encoding)) for field in self.__fields]

    @property
    def tag(self) -> str:
        return self.__tag

    @property
    def fields(self) -> Sequence[str]:
        return self.__fields

    @property
    def done(self) -> bool:
        return self.__done

    def __iter__(self) -> 'FieldIter':
        return self

    def __next__(self) -> List[str]:
        if self.__done:
            raise StopIteration

        start = self.__record_start.search(self.__buffer, self.__position)
        if start is None:
            self.__done = True
            raise StopIteration
        offset = start.start()

        opening = _OPENING_TAG_REST.match(self.__buffer, start.end())
        if opening is None:
            self.__done = True
            raise UnterminatedRecord(self.__tag, offset)

        if opening.group().endswith(b'/>'):
            end = opening.end()
        else:
            closing = self.__record_end.search(self.__buffer, opening.end())
            if closing is None:
                self.__done = True
                raise UnterminatedRecord(self.__tag, offset)
            end = closing.end()

        self.__position = end
        return self._extract_fields(offset, end)

    def _extract_fields(self, begin: int, end: int) -> List[str]:
        row = []
        cursor = begin
        for field, pattern in zip(self.__fields, self.__field_patterns):
            match = pattern.search(self.__buffer, cursor, end)
            if match is None:
                raise FieldNotFound(field, self.__tag, begin)

            raw = next((group for group in match.groups() if group is not None), b'')
            try:
                row.append(bytes(raw).decode(self.__encoding))
            except UnicodeDecodeError as e:
                raise UndecodableField(field, self.__tag, begin, self.__encoding) from e
            cursor = match.end()
        return row


def extract(buffer: bytes, tag: str, fields: Sequence[str], strict: bool = True) -> List[List[str]]:
    """
    Collect every record of `buffer` at once.

    @param strict
      If `True`, the first `ExtractError` propagates. Otherwise records that
      fail are logged and skipped.
    """
    rows = []
    field_iter = FieldIter(tag, fields, buffer)
    while True:
        try:
            rows.append(next(field_iter))
        except StopIteration:
            break
        except ExtractError as e:
            if strict:
                raise
            logger.warning('Skipping record: {}'.format(e))
    return rows
