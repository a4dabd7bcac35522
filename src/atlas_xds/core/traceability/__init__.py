"""
Rastreabilidade das gerações do Atlas XDS.

Expõe o Manifest (hashes de entrada, estado de Steps e Event Log) e as
funções explícitas que o atualizam.
"""

from .manifest import (
    XdsManifest,
    add_event,
    create_manifest,
    finalize_manifest,
    load_manifest,
    save_manifest,
    step_failed,
    step_finished,
    step_started,
)

__all__ = [
    "XdsManifest",
    "add_event",
    "create_manifest",
    "finalize_manifest",
    "load_manifest",
    "save_manifest",
    "step_failed",
    "step_finished",
    "step_started",
]
