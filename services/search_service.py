# services/search_service.py
# Version 02.00.00.00 dated 20261019
# Tag query engine - boolean search over categorized tags

"""
Advanced tag search.

A request carries one group per tag category (persons, locations, events,
others). Inside a group the operator is AND (picture has every tag) or OR
(picture has at least one). Non-empty groups are always intersected with
each other, so

    persons=AND[Clara, Romaric], locations=OR[Paris, Compiegne]

reads (Clara AND Romaric) AND (Paris OR Compiegne).

Each group compiles to a small set expression (TagUnion / TagIntersection)
that emits a parameterized SELECT over picture_tags. The expressions are
joined with INTERSECT and resolved to picture rows in a single query.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple, Union

from errors import InvalidArgumentError
from repository import PictureRepository, TagRepository
from logging_config import get_logger

logger = get_logger(__name__)

OPERATOR_AND = "AND"
OPERATOR_OR = "OR"


@dataclass
class TagGroup:
    """Tag names of one category plus the operator applied within the group."""
    tags: List[str] = field(default_factory=list)
    operator: str = OPERATOR_AND

    def __post_init__(self):
        op = self.operator or OPERATOR_AND
        if not isinstance(op, str) or op.strip().upper() not in (OPERATOR_AND, OPERATOR_OR):
            raise InvalidArgumentError(f"Invalid group operator: {self.operator!r} (expected AND or OR)")
        self.operator = op.strip().upper()

        tags = self.tags or []
        if isinstance(tags, (str, bytes)) or not isinstance(tags, (list, tuple)):
            raise InvalidArgumentError(f"Group tags must be a list of names, got {type(tags).__name__}")
        if not all(isinstance(t, str) for t in tags):
            raise InvalidArgumentError(f"Group tags must be strings: {tags!r}")
        self.tags = list(tags)

    @property
    def is_empty(self) -> bool:
        return not self.tags

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TagGroup":
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise InvalidArgumentError(f"A tag group must be an object, got {type(data).__name__}")
        return cls(tags=data.get("tags") or [], operator=data.get("operator") or OPERATOR_AND)

    def to_dict(self) -> Dict[str, Any]:
        return {"tags": list(self.tags), "operator": self.operator}


@dataclass
class SearchCriteria:
    """
    Per-category search request.

    Example:
        SearchCriteria(
            persons=TagGroup(["Clara", "Romaric"], "AND"),
            locations=TagGroup(["Paris", "Compiegne"], "OR"),
        )
    """
    persons: TagGroup = field(default_factory=TagGroup)
    locations: TagGroup = field(default_factory=TagGroup)
    events: TagGroup = field(default_factory=TagGroup)
    others: TagGroup = field(default_factory=TagGroup)

    def groups(self) -> List[TagGroup]:
        return [self.persons, self.locations, self.events, self.others]

    def non_empty_groups(self) -> List[TagGroup]:
        return [g for g in self.groups() if not g.is_empty]

    @property
    def is_empty(self) -> bool:
        return not self.non_empty_groups()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SearchCriteria":
        """
        Build criteria from the JSON shape
        {"persons": {"tags": [...], "operator": "AND"}, "locations": ..., ...}.
        """
        data = data or {}
        if not isinstance(data, dict):
            raise InvalidArgumentError(f"Search criteria must be an object, got {type(data).__name__}")
        return cls(
            persons=TagGroup.from_dict(data.get("persons")),
            locations=TagGroup.from_dict(data.get("locations")),
            events=TagGroup.from_dict(data.get("events")),
            others=TagGroup.from_dict(data.get("others")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "persons": self.persons.to_dict(),
            "locations": self.locations.to_dict(),
            "events": self.events.to_dict(),
            "others": self.others.to_dict(),
        }


# ============================================================================
# SET EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class TagUnion:
    """Paths carrying at least one of the tags."""
    tags: Tuple[str, ...]

    def to_sql(self) -> Tuple[str, tuple]:
        return TagRepository.any_tag_paths_sql(self.tags)


@dataclass(frozen=True)
class TagIntersection:
    """Paths carrying every one of the tags (tags are distinct)."""
    tags: Tuple[str, ...]

    def to_sql(self) -> Tuple[str, tuple]:
        return TagRepository.all_tags_paths_sql(self.tags)


TagSetExpression = Union[TagUnion, TagIntersection]


def compile_group(group: TagGroup) -> TagSetExpression:
    """
    Turn a non-empty group into a set expression.

    Duplicate names collapse to one, so they never inflate the AND count.
    A single distinct tag is the same set under both operators and compiles
    to a union.
    """
    tags = tuple(dict.fromkeys(group.tags))
    if group.operator == OPERATOR_OR or len(tags) == 1:
        return TagUnion(tags)
    return TagIntersection(tags)


def build_query(expressions: List[TagSetExpression]) -> Tuple[str, tuple]:
    """
    Combine set expressions with INTERSECT.

    Returns:
        (sql, params) selecting the matching picture paths
    """
    if not expressions:
        raise InvalidArgumentError("At least one tag group is required")

    parts = []
    params: tuple = ()
    for expression in expressions:
        sql, expression_params = expression.to_sql()
        parts.append(sql)
        params += expression_params

    return " INTERSECT ".join(parts), params


class SearchService:
    """Evaluates SearchCriteria against the catalog. Read-only."""

    def __init__(self, picture_repo: PictureRepository):
        self._picture_repo = picture_repo

    def search_advanced(self, criteria: Union[SearchCriteria, Dict[str, Any], None]) -> List[Dict[str, Any]]:
        """
        Return the pictures satisfying every non-empty group of criteria.

        No criteria returns every picture. Unknown tag names simply match
        nothing.

        Args:
            criteria: SearchCriteria or its dict form

        Returns:
            List of picture dicts ordered by path
        """
        if not isinstance(criteria, SearchCriteria):
            criteria = SearchCriteria.from_dict(criteria)

        groups = criteria.non_empty_groups()
        if not groups:
            logger.debug("Empty search criteria, returning all pictures")
            return self._picture_repo.get_all()

        expressions = [compile_group(g) for g in groups]
        sql, params = build_query(expressions)
        logger.debug(f"Search query: {sql} {params}")

        pictures = self._picture_repo.get_by_paths_query(sql, params)
        logger.info(f"Search matched {len(pictures)} pictures ({len(groups)} groups)")
        return pictures
