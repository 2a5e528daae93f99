# -*- coding: utf-8 -*-
"""Filesystem paths that know how they should be created and owned."""

import logging
import os
import stat
from dataclasses import dataclass, field

from .account import GroupID, UserID
from .exceptions import (PathChmodError, PathChownError, PathCreateError, PathError,
                         PathOpenFileError, PathWriteError)
from .mode import FileMode


def _current_owner():
    return UserID(os.getuid())


def _current_group():
    return GroupID(os.getgid())


def _fdopen_mode(flags):
    access = flags & (os.O_RDONLY | os.O_WRONLY | os.O_RDWR)
    append = flags & os.O_APPEND
    if access == os.O_RDWR:
        return "a+b" if append else "r+b"
    if access == os.O_WRONLY:
        return "ab" if append else "wb"
    return "rb"


@dataclass
class Path:
    """Settings for a file or folder.

    Attributes:
        path (str): Where the file or directory lives.
        auto_chmod (bool): Apply dir_mode/file_mode when creating or opening.
        auto_chown (bool): Apply owner/group when creating or opening.
        auto_create_parent (bool): Create missing parent folders when opening a file.
        dir_mode (FileMode): Mode for the directory and any parents created.
        file_mode (FileMode): Mode for the file.
        owner (UserID): User that should own the path.
        group (GroupID): Group that should own the path.
    """
    path: str = ""
    auto_chmod: bool = False
    auto_chown: bool = False
    auto_create_parent: bool = False
    dir_mode: FileMode = FileMode(0o755)
    file_mode: FileMode = FileMode(0o644)
    owner: UserID = field(default_factory=_current_owner)
    group: GroupID = field(default_factory=_current_group)

    @classmethod
    def from_config(cls, value):
        """
        Build a Path from a mapping using the keys path, auto_chmod, auto_chown,
        auto_create_parent, dir_mode, file_mode, owner and group.

        A plain string is taken as the path with every other setting defaulted.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(path=value)
        kwargs = {}
        for key in ("auto_chmod", "auto_chown", "auto_create_parent"):
            if key in value:
                kwargs[key] = bool(value[key])
        if "path" in value:
            kwargs["path"] = str(value["path"])
        if "dir_mode" in value:
            kwargs["dir_mode"] = FileMode.from_config(value["dir_mode"])
        if "file_mode" in value:
            kwargs["file_mode"] = FileMode.from_config(value["file_mode"])
        if "owner" in value:
            kwargs["owner"] = UserID.from_config(value["owner"])
        if "group" in value:
            kwargs["group"] = GroupID.from_config(value["group"])
        return cls(**kwargs)

    def abs(self):
        """Convert the path to an absolute path in place."""
        try:
            self.path = os.path.abspath(self.path)
        except OSError as e:
            raise PathError(f"failed to convert '{self.path}' to an absolute path: {e}",
                            attrs={"path": self.path}, error=e) from e

    def attrs(self):
        """Attributes of the path suitable for errors or log messages."""
        return {
            "dir_mode": f"{int(self.dir_mode):o}",
            "file_mode": f"{int(self.file_mode):o}",
            "group": str(self.group),
            "owner": str(self.owner),
            "path": self.path,
        }

    def chmod(self):
        try:
            st = os.stat(self.path)
        except OSError as e:
            raise PathError(f"failed to change permissions of '{self.path}': {e}",
                            attrs={"path": self.path}, error=e) from e

        mode = self.dir_mode if stat.S_ISDIR(st.st_mode) else self.file_mode
        try:
            os.chmod(self.path, mode)
        except OSError as e:
            raise PathChmodError(f"failed to change permissions of '{self.path}': {e}",
                                 attrs={"path": self.path, "new_mode": str(mode)},
                                 error=e) from e

    def chown(self):
        # only root may give files away
        if os.geteuid() != 0:
            logging.getLogger(__name__).debug(f"Not running as root, leaving ownership of {self.path}")
            return
        try:
            os.chown(self.path, int(self.owner), int(self.group))
        except OSError as e:
            raise PathChownError(f"failed to change ownership of '{self.path}': {e}",
                                 attrs={"path": self.path,
                                        "new_owner": str(self.owner),
                                        "new_group": str(self.group)},
                                 error=e) from e

    def mkdir_all(self):
        """
        Create the directory and any missing parents.

        Permissions and ownership are applied when auto_chmod / auto_chown are set.
        """
        try:
            os.makedirs(self.path, mode=self.dir_mode, exist_ok=True)
        except OSError as e:
            raise PathCreateError(f"failed to create path '{self.path}': {e}",
                                  attrs={"path": self.path,
                                         "dir_mode": f"{int(self.dir_mode):o}"},
                                  error=e) from e

        if self.auto_chmod:
            self.chmod()
        if self.auto_chown:
            self.chown()

    def open_file(self, flags):
        """
        Create/open the file and return a binary file object.

        :type flags: int
        :param flags: os.O_* flags as accepted by os.open
        """
        attrs = {"file": self.path, "file_mode": f"{int(self.file_mode):o}"}
        if self.auto_create_parent:
            parent = Path(path=os.path.dirname(self.path) or ".",
                          dir_mode=self.dir_mode,
                          owner=self.owner,
                          group=self.group)
            try:
                parent.mkdir_all()
            except PathError as e:
                raise PathOpenFileError(f"failed to open file '{self.path}': {e}",
                                        attrs=attrs, error=e) from e

        try:
            fd = os.open(self.path, flags, self.file_mode)
        except OSError as e:
            raise PathOpenFileError(f"failed to open file '{self.path}': {e}",
                                    attrs=attrs, error=e) from e
        handle = os.fdopen(fd, _fdopen_mode(flags))

        try:
            if self.auto_chmod:
                self.chmod()
            if self.auto_chown:
                self.chown()
        except PathError:
            handle.close()
            raise
        return handle

    def write_file(self, data, overwrite=False):
        """Write data to the file, truncating it first when overwrite is set."""
        flags = os.O_CREAT | os.O_RDWR
        if overwrite:
            flags |= os.O_TRUNC
        else:
            flags |= os.O_APPEND

        with self.open_file(flags) as handle:
            try:
                handle.write(data)
            except OSError as e:
                raise PathWriteError(f"failed to write to file '{self.path}': {e}",
                                     attrs={"file": self.path}, error=e) from e
