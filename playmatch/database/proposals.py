"""Match proposal storage.

The partial unique index idx_proposals_one_pending allows at most one
pending row per (player_id, event_id). insert_pending_proposal relies on it
for atomic insert-if-absent; history rows (accepted/declined) are not
constrained.
"""

import logging
import uuid
from datetime import datetime
from sqlite3 import Connection

from playmatch.core.types import MatchProposal, ProposalStatus
from playmatch.utilities.tz import to_iso

logger = logging.getLogger(__name__)


def insert_pending_proposal(
    conn: Connection,
    player_id: str,
    event_id: str,
    created_at: datetime,
    score: int | None = None,
) -> tuple[MatchProposal, bool]:
    """Insert a pending proposal unless one already exists for the pair.

    Args:
        conn: Database connection
        player_id: Targeted player
        event_id: Candidate event
        created_at: Creation timestamp
        score: Optional total score snapshot

    Returns:
        Tuple of (pending proposal, created) where created is False when an
        existing pending proposal was returned instead
    """
    proposal_id = str(uuid.uuid4())
    cursor = conn.execute(
        """
        INSERT OR IGNORE INTO match_proposals (
            id, event_id, player_id, status, score, created_at
        ) VALUES (?, ?, ?, 'pending', ?, ?)
        """,
        (proposal_id, event_id, player_id, score, to_iso(created_at)),
    )
    created = cursor.rowcount > 0

    proposal = get_pending_proposal(conn, player_id, event_id)
    if proposal is None:
        # Ignored insert with no pending row means a non-index conflict
        raise RuntimeError(
            f"Pending proposal for player={player_id} event={event_id} vanished after insert"
        )

    if created:
        logger.info(
            "[CREATED] Proposal id=%s player=%s event=%s score=%s",
            proposal.id,
            player_id,
            event_id,
            score,
        )
    return proposal, created


def get_proposal(conn: Connection, proposal_id: str) -> MatchProposal | None:
    """Get a proposal by ID.

    Returns:
        MatchProposal or None if not found
    """
    cursor = conn.execute("SELECT * FROM match_proposals WHERE id = ?", (proposal_id,))
    row = cursor.fetchone()
    if not row:
        return None
    return MatchProposal.from_row(dict(row))


def get_pending_proposal(
    conn: Connection, player_id: str, event_id: str
) -> MatchProposal | None:
    """Get the pending proposal for a (player, event) pair, if any."""
    cursor = conn.execute(
        """
        SELECT * FROM match_proposals
        WHERE player_id = ? AND event_id = ? AND status = 'pending'
        """,
        (player_id, event_id),
    )
    row = cursor.fetchone()
    if not row:
        return None
    return MatchProposal.from_row(dict(row))


def has_responded_proposal(conn: Connection, player_id: str, event_id: str) -> bool:
    """Check whether the player already answered a proposal for this event."""
    cursor = conn.execute(
        """
        SELECT 1 FROM match_proposals
        WHERE player_id = ? AND event_id = ? AND status != 'pending'
        LIMIT 1
        """,
        (player_id, event_id),
    )
    return cursor.fetchone() is not None


def claim_for_accept(conn: Connection, proposal_id: str) -> str | None:
    """Mark a pending proposal as being accepted.

    While a claim is held, decline transitions are refused. A later accept
    may take over the claim, so accept can be retried after a crash between
    the claim and the final transition.

    Returns:
        Claim token to pass to release_accept_claim(), or None if the
        proposal is not pending
    """
    token = uuid.uuid4().hex
    cursor = conn.execute(
        """
        UPDATE match_proposals
        SET accept_claim = ?
        WHERE id = ? AND status = 'pending'
        """,
        (token, proposal_id),
    )
    return token if cursor.rowcount > 0 else None


def release_accept_claim(conn: Connection, proposal_id: str, token: str) -> None:
    """Drop an accept claim, unless another accept has taken it over."""
    conn.execute(
        """
        UPDATE match_proposals
        SET accept_claim = NULL
        WHERE id = ? AND status = 'pending' AND accept_claim = ?
        """,
        (proposal_id, token),
    )


def transition_proposal(
    conn: Connection,
    proposal_id: str,
    target: ProposalStatus,
    responded_at: datetime,
    commitment_acknowledged_at: datetime | None = None,
) -> bool:
    """Move a pending proposal to a terminal status.

    The update is conditional on the row still being pending, so of two
    racing transitions only one succeeds. A decline also requires that no
    accept holds a claim on the row.

    Returns:
        True if the row was pending and is now `target`
    """
    unclaimed = " AND accept_claim IS NULL" if target is ProposalStatus.DECLINED else ""
    cursor = conn.execute(
        f"""
        UPDATE match_proposals
        SET status = ?, responded_at = ?, commitment_acknowledged_at = ?,
            accept_claim = NULL
        WHERE id = ? AND status = 'pending'{unclaimed}
        """,
        (
            target.value,
            to_iso(responded_at),
            to_iso(commitment_acknowledged_at),
            proposal_id,
        ),
    )
    return cursor.rowcount > 0


def list_proposals_for_player(
    conn: Connection,
    player_id: str,
    status: ProposalStatus | None = ProposalStatus.PENDING,
) -> list[MatchProposal]:
    """Get a player's proposals, newest first.

    Args:
        conn: Database connection
        player_id: Player ID
        status: Status filter; None returns every status
    """
    if status is None:
        cursor = conn.execute(
            "SELECT * FROM match_proposals WHERE player_id = ? ORDER BY created_at DESC",
            (player_id,),
        )
    else:
        cursor = conn.execute(
            """
            SELECT * FROM match_proposals
            WHERE player_id = ? AND status = ?
            ORDER BY created_at DESC
            """,
            (player_id, status.value),
        )
    return [MatchProposal.from_row(dict(row)) for row in cursor.fetchall()]


def list_proposals_for_event(conn: Connection, event_id: str) -> list[MatchProposal]:
    """Get every proposal made for an event, oldest first."""
    cursor = conn.execute(
        "SELECT * FROM match_proposals WHERE event_id = ? ORDER BY created_at",
        (event_id,),
    )
    return [MatchProposal.from_row(dict(row)) for row in cursor.fetchall()]
