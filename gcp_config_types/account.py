# -*- coding: utf-8 -*-
"""User and group identifiers that may be written as names or numbers."""

import grp
import json
import os
import pwd

MIN_ACCOUNT_ID = -1
MAX_ACCOUNT_ID = 65535


def lookup_user_id(name):
    try:
        return pwd.getpwnam(name).pw_uid
    except KeyError:
        raise ValueError(f"failed to lookup user named '{name}'") from None


def lookup_group_id(name):
    try:
        return grp.getgrnam(name).gr_gid
    except KeyError:
        raise ValueError(f"failed to lookup group named '{name}'") from None


def _check_range(account_id):
    if account_id < MIN_ACCOUNT_ID or account_id > MAX_ACCOUNT_ID:
        raise ValueError(f"user/group ID must be between {MIN_ACCOUNT_ID} and "
                         f"{MAX_ACCOUNT_ID}, inclusively")


def parse_account_id(data, current_id, lookup_account):
    """
    Parse a user or group given as an empty string, a number or a name.

    An empty string or -1 selects the current user/group.

    :type data: str
    :param data: The text to parse

    :type current_id: callable
    :param current_id: returns the id of the current user/group

    :type lookup_account: callable
    :param lookup_account: maps a name to its id, raising ValueError if unknown
    """
    if data == "":
        return current_id()

    try:
        account_id = int(data)
    except ValueError:
        return lookup_account(data)

    _check_range(account_id)
    if account_id == -1:
        return current_id()
    return account_id


class _AccountID(int):
    _current_id = None
    _lookup = None

    @classmethod
    def parse(cls, data):
        return cls(parse_account_id(data, cls._current_id, cls._lookup))

    @classmethod
    def from_config(cls, value):
        """Accepts an integer id or a string as understood by parse."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError("an account id can not be a boolean")
        if isinstance(value, int):
            _check_range(value)
            if value == -1:
                return cls(cls._current_id())
            return cls(value)
        if isinstance(value, str):
            return cls.parse(value)
        raise ValueError(f"can not build an account id from {type(value).__name__}")

    def to_json(self):
        return json.dumps(str(self))


class UserID(_AccountID):
    """A user id, shown as the user name when it exists."""

    _current_id = staticmethod(os.getuid)
    _lookup = staticmethod(lookup_user_id)

    def __str__(self):
        try:
            return pwd.getpwuid(self).pw_name
        except KeyError:
            return str(int(self))

    def __repr__(self):
        return f"UserID({int(self)})"


class GroupID(_AccountID):
    """A group id, shown as the group name when it exists."""

    _current_id = staticmethod(os.getgid)
    _lookup = staticmethod(lookup_group_id)

    def __str__(self):
        try:
            return grp.getgrgid(self).gr_name
        except KeyError:
            return str(int(self))

    def __repr__(self):
        return f"GroupID({int(self)})"
