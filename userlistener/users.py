"""
User records carried by a listener connection.

A payload is one JSON array of user objects. Decoding is all-or-nothing:
a single bad element rejects the whole batch.
"""
import sys
from typing import Any, Dict, List, Optional, TextIO

import ujson as json

from .config import ID_MIN, ID_MAX, NO_ADDRESS

REQUIRED_TEXT = ('name', 'username', 'email')


class DecodeError(ValueError):
    """Raised when a payload is not a valid JSON array of users."""


class User:
    """A single decoded user."""
    __slots__ = ['id', 'name', 'username', 'email', 'address']

    def __init__(self,
                 id: int,
                 name: str,
                 username: str,
                 email: str,
                 address: Optional[str] = None):
        self.id = id
        self.name = name
        self.username = username
        self.email = email
        self.address = address

    @classmethod
    def from_dict(cls, item: Any, index: int = 0) -> 'User':
        """Validate one array element and build a User from it."""
        if not isinstance(item, dict):
            raise DecodeError(
                f"element {index}: expected an object, "
                f"got {type(item).__name__}")

        try:
            user_id = item['id']
        except KeyError:
            raise DecodeError(f"element {index}: missing field `id`") from None
        # bool is an int subclass but never a valid id.
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise DecodeError(f"element {index}: `id` must be an integer")
        if not ID_MIN <= user_id <= ID_MAX:
            raise DecodeError(f"element {index}: `id` {user_id} out of range")

        fields = {}
        for key in REQUIRED_TEXT:
            try:
                val = item[key]
            except KeyError:
                raise DecodeError(
                    f"element {index}: missing field `{key}`") from None
            if not isinstance(val, str):
                raise DecodeError(f"element {index}: `{key}` must be a string")
            fields[key] = val

        address = item.get('address')
        if address is not None and not isinstance(address, str):
            raise DecodeError(f"element {index}: `address` must be a string")

        return cls(id=user_id, address=address, **fields)

    def to_dict(self) -> Dict[str, Any]:
        return {k: getattr(self, k) for k in self.__slots__}

    def __eq__(self, other):
        if not isinstance(other, User):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"User({self.to_dict()!r})"

    def __str__(self):
        address = self.address if self.address is not None else NO_ADDRESS
        return (f"(id={self.id}, name={self.name}, username={self.username}, "
                f"email={self.email}, address={address})")


def parse_users(payload: bytes) -> List[User]:
    """Decode a complete payload into a list of users, in input order."""
    try:
        text = payload.decode('utf-8')
    except UnicodeDecodeError as err:
        raise DecodeError(f"payload is not valid UTF-8: {err}") from err

    try:
        data = json.loads(text)
    except (ValueError, OverflowError) as err:
        raise DecodeError(f"invalid JSON: {err}") from err

    if not isinstance(data, list):
        raise DecodeError(
            f"expected a JSON array, got {type(data).__name__}")

    return [User.from_dict(item, i) for i, item in enumerate(data)]


def report_users(users: List[User], out: Optional[TextIO] = None) -> None:
    """Write one block per user to `out` (stdout by default)."""
    out = out if out is not None else sys.stdout
    for user in users:
        print(f"=> Found user\n    {user}", file=out)
    out.flush()
