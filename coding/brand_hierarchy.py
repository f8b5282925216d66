"""
Brand Hierarchy Manager
Inject parent-brand codes into a codeframe, fold sub-brands and aliases under them,
and roll coded responses up to their parent brands
"""

import copy
import hashlib
import json
import logging
import re
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from config import (
    BRAND_CATEGORY, BRAND_FAMILIES_FILE, DEFAULT_BRAND_FAMILIES,
    PARENT_NUMERIC_START, PARENT_NUMERIC_STEP, CHILD_NUMERIC_OFFSET, ALIAS_NUMERIC_START
)
from core.models import (
    BrandHierarchy, BrandRollupConfig, Codeframe, CodeframeEntry, CodedResponse
)
from .catch_all import is_catch_all

logger = logging.getLogger(__name__)


def brand_code(name: str) -> str:
    """
    Code for a brand name: BRAND_ + upper snake case ("Coke Zero" -> "BRAND_COKE_ZERO").

    Letters and digits of any script are kept ("Nestlé" -> "BRAND_NESTLÉ").
    A name with no letters or digits gets a code derived from its digest.
    """
    slug = re.sub(r"[\W_]+", "_", name.strip().upper()).strip("_")
    if not slug:
        slug = hashlib.sha1(name.encode("utf-8")).hexdigest()[:8].upper()
    return f"BRAND_{slug}"


def load_brand_families(path: str) -> List[Dict[str, Any]]:
    """
    Load brand families from a JSON file.

    Expected shape: ``[{"parent": "PepsiCo", "keywords": ["pepsi", "7up"]}, ...]``
    """
    with open(path, "r", encoding="utf-8") as f:
        families = json.load(f)
    if not isinstance(families, list):
        raise ValueError(f"Brand families file {path} must contain a JSON array")
    for family in families:
        if not isinstance(family, dict) or "parent" not in family or not isinstance(family.get("keywords"), list):
            raise ValueError(f"Invalid brand family entry in {path}: {family!r}")
    return families


class _NumericAllocator:
    """Hands out numeric ids, bumping past any value already in use"""

    def __init__(self, used: Iterable[int]):
        self.used = set(used)

    def claim(self, preferred: int) -> int:
        value = preferred
        while value in self.used:
            value += 1
        self.used.add(value)
        return value


def _catch_alls_last(entries: List[CodeframeEntry]) -> List[CodeframeEntry]:
    """Renumber catch-all entries above every other numeric id, keeping their order"""
    ceiling = max(
        (v for v in (e.numeric_value() for e in entries if not is_catch_all(e)) if v is not None),
        default=0
    )
    catch_alls = [e for e in entries if is_catch_all(e)]
    if all((e.numeric_value() or 0) > ceiling for e in catch_alls):
        return entries

    renumbered = {e.code: replace(e, numeric=ceiling + i + 1) for i, e in enumerate(catch_alls)}
    return [renumbered.get(e.code, e) for e in entries]


class BrandHierarchyManager:
    """
    Holds one project's brand roll-up configuration.

    One instance per active project, passed to whoever needs it. The config is
    mutable through ``add_hierarchy``/``import_config`` and is not safe for
    concurrent writers; callers serialize those calls.
    """

    def __init__(self, config: Optional[BrandRollupConfig] = None):
        self.config = copy.deepcopy(config) if config is not None else BrandRollupConfig()

    def add_hierarchy(self, parent_brand: str, sub_brands: Sequence[str],
                      aliases: Optional[Sequence[str]] = None) -> BrandHierarchy:
        """Append a hierarchy; overlaps with existing hierarchies are not checked"""
        hierarchy = BrandHierarchy(
            parent_brand=parent_brand,
            sub_brands=list(sub_brands),
            aliases=list(aliases or [])
        )
        self.config.hierarchies.append(hierarchy)
        return hierarchy

    # ==========================================
    # CODEFRAME PROCESSING
    # ==========================================

    def process_codeframe(self, codeframe: Codeframe) -> Codeframe:
        """
        Rebuild a codeframe around the configured brand hierarchies.

        Output order: for each hierarchy in declaration order its parent, then
        its sub-brands, then its aliases; then the original brand-category
        entries that were not replaced; then every other original entry.
        A code already emitted is never emitted again, so a name declared as
        both sub-brand and alias keeps its first role.
        Catch-all entries are renumbered above every other numeric id when the
        brand numerics would otherwise outrank them.

        Returns the input unchanged when roll-up is disabled.
        """
        if not self.config.rollup_enabled:
            return codeframe

        allocator = _NumericAllocator(
            v for v in (e.numeric_value() for e in codeframe.entries) if v is not None
        )
        processed: List[CodeframeEntry] = []
        emitted = set()
        alias_count = 0

        for h_index, hierarchy in enumerate(self.config.hierarchies):
            parent_code = brand_code(hierarchy.parent_brand)
            parent_numeric = PARENT_NUMERIC_START + h_index * PARENT_NUMERIC_STEP

            if parent_code not in emitted:
                parent_numeric = allocator.claim(parent_numeric)
                sub_list = ", ".join(hierarchy.sub_brands) or "no listed sub-brands"
                processed.append(CodeframeEntry(
                    code=parent_code,
                    label=hierarchy.parent_brand,
                    definition=f"Parent brand encompassing {sub_list}",
                    numeric=parent_numeric,
                    category=BRAND_CATEGORY,
                    is_parent=True,
                ))
                emitted.add(parent_code)

            for index, sub_brand in enumerate(hierarchy.sub_brands):
                code = brand_code(sub_brand)
                if code in emitted:
                    continue
                processed.append(CodeframeEntry(
                    code=code,
                    label=sub_brand,
                    definition=f"Sub-brand of {hierarchy.parent_brand}",
                    numeric=allocator.claim(parent_numeric + CHILD_NUMERIC_OFFSET + index),
                    category=BRAND_CATEGORY,
                    parent_code=parent_code,
                ))
                emitted.add(code)

            for alias in hierarchy.aliases:
                code = brand_code(alias)
                if code in emitted:
                    continue
                processed.append(CodeframeEntry(
                    code=code,
                    label=alias,
                    definition=f"Alias for {hierarchy.parent_brand}",
                    numeric=allocator.claim(ALIAS_NUMERIC_START + alias_count),
                    category=BRAND_CATEGORY,
                    parent_code=parent_code,
                    is_alias=True,
                ))
                alias_count += 1
                emitted.add(code)

        # Uncategorized brand mentions the hierarchies did not cover
        for entry in codeframe.entries:
            if entry.category == BRAND_CATEGORY and entry.code not in emitted:
                processed.append(entry)
                emitted.add(entry.code)

        for entry in codeframe.entries:
            if entry.category == BRAND_CATEGORY:
                continue
            if entry.code in emitted:
                logger.warning("Dropping entry %s: code replaced by a brand hierarchy code", entry.code)
                continue
            processed.append(entry)

        processed = _catch_alls_last(processed)

        logger.info(
            "Applied %d brand hierarchies to group %s (%d -> %d entries)",
            len(self.config.hierarchies), codeframe.group_id,
            len(codeframe.entries), len(processed)
        )
        return codeframe.with_entries(processed)

    # ==========================================
    # RESPONSE ROLL-UP
    # ==========================================

    def _parent_lookup(self) -> Dict[str, List[str]]:
        """Sub-brand/alias code -> parent codes of every hierarchy declaring it"""
        lookup: Dict[str, List[str]] = {}
        for hierarchy in self.config.hierarchies:
            parent_code = brand_code(hierarchy.parent_brand)
            for name in list(hierarchy.sub_brands) + list(hierarchy.aliases):
                code = brand_code(name)
                if code == parent_code:
                    continue
                parents = lookup.setdefault(code, [])
                if parent_code not in parents:
                    parents.append(parent_code)
        return lookup

    def roll_up_responses(self, coded_responses: Sequence[CodedResponse]) -> List[CodedResponse]:
        """
        Add parent-brand codes to responses coded with a sub-brand or alias.

        Strictly additive and order-preserving; input responses are not modified.
        """
        if not self.config.rollup_enabled:
            return list(coded_responses)

        lookup = self._parent_lookup()
        rolled = []
        for response in coded_responses:
            codes = list(response.codes_assigned)
            for code in response.codes_assigned:
                for parent_code in lookup.get(code, []):
                    if parent_code not in codes:
                        codes.append(parent_code)
            if len(codes) == len(response.codes_assigned):
                rolled.append(response)
            else:
                rolled.append(replace(response, codes_assigned=codes))
        return rolled

    # ==========================================
    # SUGGESTIONS & REPORTING
    # ==========================================

    def suggest_hierarchies(self, codeframe: Codeframe,
                            families: Optional[List[Dict[str, Any]]] = None) -> List[BrandHierarchy]:
        """
        Propose hierarchies for brand families with at least two matching entries.

        Matching is a case-insensitive substring test of each brand entry's
        label against the family keywords. Does not touch the configuration.

        Args:
            codeframe: Codeframe whose brand-category entries are scanned
            families: ``[{"parent": ..., "keywords": [...]}]``; defaults to the
                      configured brand families file, else the built-in seed list
        """
        if families is None:
            families = load_brand_families(BRAND_FAMILIES_FILE) if BRAND_FAMILIES_FILE else DEFAULT_BRAND_FAMILIES

        brand_entries = [e for e in codeframe.entries if e.category == BRAND_CATEGORY]
        suggestions = []
        for family in families:
            keywords = [k.lower() for k in family["keywords"]]
            matching = [
                e.label for e in brand_entries
                if any(k in e.label.lower() for k in keywords)
            ]
            if len(matching) >= 2:
                suggestions.append(BrandHierarchy(
                    parent_brand=family["parent"],
                    sub_brands=matching,
                    aliases=[]
                ))
        return suggestions

    def generate_hierarchy_summary(self) -> str:
        """Plain-text tree of the configured hierarchies and roll-up flags"""
        lines = ["BRAND HIERARCHY STRUCTURE", "=" * 50, ""]

        for hierarchy in self.config.hierarchies:
            lines.append(f"{hierarchy.parent_brand} (Parent Brand)")
            for sub_brand in hierarchy.sub_brands:
                lines.append(f"   └─ {sub_brand}")
            if hierarchy.aliases:
                lines.append(f"   Aliases: {', '.join(hierarchy.aliases)}")
            lines.append("")

        lines.append(f"Roll-up Status: {'ENABLED' if self.config.rollup_enabled else 'DISABLED'}")
        lines.append(f"Preserve Sub-brands: {'YES' if self.config.preserve_sub_brands else 'NO'}")
        return "\n".join(lines)

    def export_config(self) -> Dict[str, Any]:
        """JSON-serializable snapshot of the configuration"""
        return self.config.to_dict()

    def import_config(self, config: Union[BrandRollupConfig, Dict[str, Any]]) -> None:
        """Replace the configuration with an exported snapshot (or a config object)"""
        if isinstance(config, BrandRollupConfig):
            self.config = copy.deepcopy(config)
        else:
            self.config = BrandRollupConfig.from_dict(config)
