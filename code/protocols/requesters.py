#!/usr/bin/env python3
# protocols/requesters.py
"""
Fusion des ensembles de demandeurs entre un nœud et un pair rencontré.

Pour chaque message M détenu par le pair:
- M est le contenu X et le nœud détient aussi X: union des demandeurs dans X local.
- M est un intérêt pour C: union de ses demandeurs dans le contenu C local s'il
  existe, et dans l'intérêt local pour C s'il existe.

La fusion est une union d'ensembles: elle est idempotente et ne retire jamais
de demandeur.
"""
from models.message import MessageKind


def merge_requesters(buffer, peer_views) -> int:
    """
    Fusionne les demandeurs des messages d'un pair dans le buffer local.

    Args:
        buffer (MessageBuffer): Buffer du nœud local (modifié en place)
        peer_views (iterable[MessageView]): Vues immuables des messages du pair

    Returns:
        int: Nombre total de demandeurs ajoutés
    """
    added = 0
    for view in peer_views:
        if not view.requesters:
            continue
        if view.kind is MessageKind.CONTENT:
            local_content = buffer.content(view.id)
            if local_content is not None:
                added += local_content.add_requesters(view.requesters)
        elif view.kind is MessageKind.INTEREST:
            local_content = buffer.content(view.content_id)
            if local_content is not None:
                added += local_content.add_requesters(view.requesters)
            local_interest = buffer.interest_for(view.content_id)
            if local_interest is not None:
                added += local_interest.add_requesters(view.requesters)
    return added
