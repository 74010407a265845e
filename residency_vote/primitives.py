import importlib
import logging
from typing import Any, Dict, Protocol

from residency_vote.models.statement_model import Statement

logger = logging.getLogger(__name__)


class ProofPrimitive(Protocol):
    """
    Zero-knowledge verification backend for identity statements.
    Returns True iff `proof` proves `statement` for the credential with the given commitments.
    """

    def verify(
        self,
        challenge: bytes,
        global_context: Dict[str, Any],
        credential_id: bytes,
        commitments: Dict[str, Any],
        statement: Statement,
        proof: Any,
    ) -> bool:
        ...


def load_primitive(path: str) -> ProofPrimitive:
    """
    Resolve a "package.module:attribute" path to a proof backend.
    A class is instantiated without arguments; any other object is used as is.
    """
    if not path or ":" not in path:
        raise RuntimeError("PROOF_PRIMITIVE must be set to 'package.module:attribute'")
    module_name, _, attribute = path.partition(":")
    module = importlib.import_module(module_name)
    try:
        target = getattr(module, attribute)
    except AttributeError:
        raise RuntimeError(f"{module_name} has no attribute {attribute}")
    primitive = target() if isinstance(target, type) else target
    if not callable(getattr(primitive, "verify", None)):
        raise RuntimeError(f"{path} does not provide a verify() method")
    logger.info(f"Using proof backend {path}")
    return primitive
