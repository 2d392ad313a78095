"""
Bootstrap environment for Streamlit Cloud & local dev:
- Flatten st.secrets into uppercase os.environ keys (nested -> PREFIX_CHILD),
  e.g. a [supabase] table with `url` becomes SUPABASE_URL
- Then load .env (without overriding existing env vars)
"""

from __future__ import annotations

import os
import re
from typing import Iterator, Mapping, Tuple

import streamlit as st
from dotenv import load_dotenv

from car_dashboard.logger import get_logger

logger = get_logger("bootstrap_env")


def _sanitize_key(key: str) -> str:
    return re.sub(r"[^A-Za-z0-9_]", "_", key.upper())


def _flatten_secrets(prefix: str, val) -> Iterator[Tuple[str, str]]:
    if isinstance(val, Mapping):
        for k, v in val.items():
            yield from _flatten_secrets(f"{prefix}_{k}", v)
    else:
        yield _sanitize_key(prefix), str(val)


def bridge_secrets(secrets: Mapping) -> int:
    """Copy a secrets mapping into os.environ without overriding. Returns keys set."""
    count = 0
    for key, value in secrets.items():
        for flat_k, flat_v in _flatten_secrets(key, value):
            if flat_k not in os.environ:
                os.environ[flat_k] = flat_v
                count += 1
    return count


def _bridge_streamlit_secrets() -> None:
    # st.secrets raises when no secrets.toml exists (plain local runs, tests)
    try:
        secrets_dict = st.secrets.to_dict()
    except Exception as exc:
        logger.debug("No Streamlit secrets available: %s", exc)
        return
    count = bridge_secrets(secrets_dict)
    if count:
        logger.info("Bridged %d secret(s) into the environment", count)


def ensure_env() -> None:
    """Idempotent: make sure env vars are available.
    Safe to call multiple times, both inside and outside Streamlit runtime.
    """
    _bridge_streamlit_secrets()
    load_dotenv()


# Execute on import for the Streamlit main process, but also allow explicit calls elsewhere.
ensure_env()
