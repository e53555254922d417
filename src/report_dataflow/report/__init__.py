"""Geração de relatórios a partir do Manifest."""

from .report_md import REQUIRED_SECTIONS, generate_report_md  # noqa: F401
