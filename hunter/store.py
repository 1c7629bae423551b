"""Durable account records: one JSON file per username.

Saves go through a temp file and ``os.replace`` so a crash mid-write leaves
either the old record or the new one, never a torn file. The store applies
whole-record overwrite: if two sessions hold the same account, the last save
wins.

Registration publishes with ``os.link`` instead, which fails if the file
already exists, so two concurrent registrations of one name cannot both
succeed.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path

import bcrypt

from .account import Account
from .errors import (
    ConflictError,
    InvalidCredentialsError,
    StorageError,
    UnknownAccountError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 4
MAX_PASSWORD_BYTES = 72  # bcrypt input limit

_USERNAME_RE = re.compile(r"^[a-z0-9_.-]+$")


def normalize_username(username: str) -> str:
    return (username or "").strip().lower()


def _check_username(username: str) -> str:
    name = normalize_username(username)
    if not name:
        raise ValidationError("username required")
    if name in (".", "..") or not _USERNAME_RE.match(name):
        raise ValidationError("username may only contain letters, digits, '_', '.' and '-'")
    return name


class AccountStore:
    """Register, authenticate, load and save accounts under ``data_dir``."""

    def __init__(self, data_dir: str | Path, bcrypt_rounds: int = 12):
        self._dir = Path(data_dir)
        self._rounds = bcrypt_rounds

    @property
    def data_dir(self) -> Path:
        return self._dir

    def _path(self, username: str) -> Path:
        return self._dir / f"{username}.json"

    def exists(self, username: str) -> bool:
        try:
            name = _check_username(username)
        except ValidationError:
            return False
        return self._path(name).exists()

    # ── Credentials ─────────────────────────────────────────────

    def register(self, username: str, password: str) -> Account:
        name = _check_username(username)
        password = password or ""
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"password must be at least {MIN_PASSWORD_LENGTH} characters")
        if len(password.encode()) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        if self.exists(name):
            raise ConflictError("username already taken")

        hashed = bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self._rounds)).decode()
        account = Account(username=name, password_hash=hashed)
        self._write(account, create=True)
        logger.info("Registered account %s", name)
        return account

    def authenticate(self, username: str, password: str) -> Account:
        name = _check_username(username)
        if not self.exists(name):
            raise UnknownAccountError()
        account = self.load(name)
        try:
            ok = bcrypt.checkpw((password or "").encode(), account.password_hash.encode())
        except ValueError:
            # Over-long password or unreadable stored hash.
            ok = False
        if not ok:
            raise InvalidCredentialsError()
        logger.debug("Authenticated %s", name)
        return account

    # ── Records ─────────────────────────────────────────────────

    def load(self, username: str) -> Account:
        name = _check_username(username)
        path = self._path(name)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise UnknownAccountError() from e
        except (OSError, ValueError) as e:
            raise StorageError(f"cannot read record for {name}: {e}") from e
        if not isinstance(raw, dict):
            raise StorageError(f"record for {name} is not a JSON object")

        raw.setdefault("username", name)
        try:
            account = Account.from_record(raw)
        except (AttributeError, TypeError, ValueError) as e:
            raise StorageError(f"record for {name} is malformed: {e}") from e
        logger.debug("Loaded %s: level=%d exp=%d", name, account.level, account.experience)
        return account

    def save(self, account: Account) -> None:
        self._write(account)

    def _write(self, account: Account, create: bool = False) -> None:
        """Write via temp file. With ``create``, refuse to replace an existing record."""
        record = account.to_record()
        name = _check_username(record["username"])
        path = self._path(name)
        tmp_name = ""
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._dir,
                prefix=f".{name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                json.dump(record, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            if create:
                os.link(tmp_name, path)
                Path(tmp_name).unlink()
            else:
                os.replace(tmp_name, path)
        except FileExistsError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise ConflictError("username already taken") from e
        except OSError as e:
            if tmp_name:
                Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"cannot save record for {name}: {e}") from e
        logger.debug("Saved %s to %s", name, path)
