# residency_vote/exceptions.py
# Errors raised while checking a proof request. Each one ends the request.


class ProofError(Exception):
    """Base class for every verifier-side rejection."""
    message = "Internal error."


class NotAllowed(ProofError):
    """The account credential is of the initial kind and carries no commitments."""
    message = "Needs proof."


class InvalidProofs(ProofError):
    message = "Invalid proofs."


class StatementNotAllowed(ProofError):
    message = "Statement not allowed."


class CredentialError(ProofError):
    """The submitted credential id does not belong to the account."""
    message = "Issue with credential."


class NodeAccessError(ProofError):
    """Querying the node failed. Wraps the underlying cause."""

    def __init__(self, cause):
        super().__init__(str(cause))
        self.cause = cause

    @property
    def message(self) -> str:
        return f"Cannot access the node: {self.cause}"
