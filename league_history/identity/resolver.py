from typing import Dict, Iterable, List, Optional

from loguru import logger

from league_history.models.owner import Owner, OwnerIdentity
from league_history.utils.misc_utils import slugify


class InvalidIdentity(ValueError):
    """Raised when an owner name is missing or blank."""

    pass


class IdentityResolver:
    """Maps free-text owner names onto canonical owner identities.

    Two names are the same owner iff they slugify to the same id. The only
    other input is the explicit override table (raw name -> canonical name),
    which is applied before slugifying. There is no fuzzy matching.
    """

    def __init__(
        self,
        name_fixes: Optional[Dict[str, str]] = None,
        display_names: Optional[Dict[str, str]] = None,
    ):
        self.name_fixes: Dict[str, str] = {
            self._clean(raw): self._clean(canonical)
            for raw, canonical in (name_fixes or {}).items()
        }
        # Case-insensitive fallback for the same table
        self._folded_fixes: Dict[str, str] = {
            raw.casefold(): canonical for raw, canonical in self.name_fixes.items()
        }
        self.display_names: Dict[str, str] = dict(display_names or {})
        logger.debug(
            f"IdentityResolver initialized with {len(self.name_fixes)} name fixes "
            f"and {len(self.display_names)} display-name mappings."
        )

    @staticmethod
    def _clean(name: str) -> str:
        return " ".join(name.split())

    def _fix(self, name: str) -> str:
        return self.name_fixes.get(name) or self._folded_fixes.get(name.casefold(), name)

    def _apply_fixes(self, name: str) -> str:
        """Follows the fix table until the name stops changing.

        A cycle in the table resolves to its alphabetically first name, so
        every name on the cycle lands on the same identity.
        """
        seen = {name}
        fixed = self._fix(name)
        while fixed not in seen:
            seen.add(fixed)
            name, fixed = fixed, self._fix(fixed)
        if fixed == name:
            return name

        cycle = [fixed]
        current = self._fix(fixed)
        while current != fixed:
            cycle.append(current)
            current = self._fix(current)
        chosen = min(cycle, key=lambda n: (n.casefold(), n))
        logger.warning(f"Name fixes form a cycle {cycle}; using '{chosen}'")
        return chosen

    def resolve(self, display_name: Optional[str]) -> OwnerIdentity:
        """Resolves a display name to its identity. Pure; nothing is cached."""
        if display_name is None or not display_name.strip():
            raise InvalidIdentity(f"Owner name is empty: {display_name!r}")

        cleaned = self._clean(display_name)
        canonical = self._apply_fixes(cleaned)
        owner_id = slugify(canonical)
        if not owner_id:
            raise InvalidIdentity(f"Owner name has no identifying characters: {display_name!r}")

        aliases = [cleaned] if cleaned != canonical else []
        return OwnerIdentity(id=owner_id, canonical_name=canonical, aliases=aliases)

    def canonical_name(self, display_name: Optional[str]) -> str:
        return self.resolve(display_name).canonical_name

    def owner_id(self, display_name: Optional[str]) -> str:
        return self.resolve(display_name).id

    def resolve_member(
        self,
        display_name: Optional[str],
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        team_name: Optional[str] = None,
        known_owners: Optional[Iterable[Owner]] = None,
    ) -> str:
        """Canonical name for a fantasy platform member profile.

        Tried in order: the display-name mapping, the member's real name
        (capitalized, then through the name fixes), an already known owner
        whose name or team name matches the display name or ``team_name``,
        and finally the display name itself.
        """
        if display_name and display_name in self.display_names:
            return self.canonical_name(self.display_names[display_name])

        full_name = f"{(first_name or '').strip()} {(last_name or '').strip()}".strip()
        if full_name:
            capitalized = " ".join(
                word[:1].upper() + word[1:].lower() for word in full_name.split()
            )
            return self.canonical_name(capitalized)

        if known_owners:
            known_owners = list(known_owners)
            for name in (display_name, team_name):
                owner = find_owner(name, known_owners) if name else None
                if owner is not None:
                    logger.debug(f"Matched platform member '{name}' to known owner '{owner.name}'")
                    return self.canonical_name(owner.name)

        if display_name and display_name.strip():
            return self.canonical_name(display_name)
        return "Unknown"


class IdentityRegistry:
    """Tracks identities seen during one aggregation run.

    The first spelling observed for an id becomes its canonical display name
    and is never changed afterwards; later spellings accumulate as aliases.
    """

    def __init__(self, resolver: IdentityResolver):
        self.resolver = resolver
        self._identities: Dict[str, OwnerIdentity] = {}

    def observe(self, display_name: str, team_name: Optional[str] = None) -> OwnerIdentity:
        resolved = self.resolver.resolve(display_name)
        identity = self._identities.get(resolved.id)
        if identity is None:
            identity = resolved
            self._identities[resolved.id] = identity
            logger.debug(f"New owner identity '{identity.canonical_name}' ({identity.id})")
        else:
            for spelling in [resolved.canonical_name, *resolved.aliases]:
                if spelling != identity.canonical_name and spelling not in identity.aliases:
                    identity.aliases.append(spelling)

        if team_name and team_name not in identity.team_names:
            identity.team_names.append(team_name)
        return identity


def find_owner(name: str, owners: Iterable[Owner]) -> Optional[Owner]:
    """Finds an owner by name, id or any team name they have used."""
    normalized = name.strip().casefold()
    if not normalized:
        return None
    slug = slugify(name)
    candidates: List[Owner] = list(owners)
    for owner in candidates:
        if owner.name.strip().casefold() == normalized or owner.id == slug:
            return owner
    for owner in candidates:
        if any(team.strip().casefold() == normalized for team in owner.team_names):
            return owner
    return None
