"""Convert HTTP verb + path template to action names.

Pattern: {verb}{Middle}{Leaf}
  - Middle is the segment right after the namespace segment
  - Leaf is the last segment, without a leading copy of the verb
  - An escalation folds extra trailing segments in between

Examples (namespace "rest"):
  GET  /rest/regional/addressList                      -> getRegionalAddressList
  GET  /rest/local/{region}/{locationType}/article     -> getLocalArticle
  POST /rest/publishGeneral                            -> postPublishGeneral
  GET  /rest/region/facilities/{facility}/getDisplayData, escalation 1
                                                       -> getRegionFacilityDisplayData
"""

from __future__ import annotations

from .collisions import deparameterize, split_path
from .models import Escalation, EscalationLike


def _upper_first(segment: str) -> str:
    segment = deparameterize(segment)
    return segment[:1].upper() + segment[1:]


def synthesize_name(
    verb: str,
    path: str,
    namespace: str = "rest",
    escalation: EscalationLike = None,
) -> str:
    verb = verb.lower()
    escalation = Escalation.coerce(escalation)
    segments = [deparameterize(segment) for segment in split_path(path)]
    if not segments:
        return verb

    namespace_index = segments.index(namespace) if namespace in segments else -1
    first = segments[namespace_index + 1] if namespace_index + 1 < len(segments) else ""
    leaf = segments[-1]

    middle = _upper_first(first)
    trimmed_leaf = leaf[len(verb):] if leaf.lower().startswith(verb) else leaf
    end = _upper_first(trimmed_leaf) if leaf != first else ""

    if escalation:
        start = max(len(segments) - 1 - escalation.count, 0)
        extra = "".join(_upper_first(segment) for segment in segments[start:-1])
        if extra == middle:
            extra = ""
        end = f"{extra}{end}"

    return f"{verb}{middle}{end}"
