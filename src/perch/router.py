"""Path router: one request path in, ``Served`` or ``NotFound`` out.

Algorithm, per request:

1. Normalize the request path; unaddressable paths are ``NotFound``.
2. The first rewrite rule (in declaration order) whose source matches
   supplies the effective lookup path. Rewrites are single-hop: the rule
   list is never re-run against a rewritten path.
3. With no match, the request path is the lookup path.
4. Look the path up under the serving root, exactly and case-sensitively:
   the file itself, then the directory's index file, then (with
   ``clean_urls``) ``<path>.html``.

Pure and synchronous over immutable inputs, so one router is shared by
every concurrent request of a deployment.
"""

import logging

from perch.paths import join, normalize_request_path, relative
from perch.resolution import NotFound, Resolution, Served
from perch.rewrites import RewriteRule, RuleSet, strip_query
from perch.tree import TreeView

logger = logging.getLogger("perch.router")


class PathRouter:
    """Resolve request paths against a serving root and rewrite rules.

    Usage::

        router = PathRouter(tree.scoped("public"), compile_rules(rules))
        router.resolve("/about")  # Served(...) or NotFound(...)
    """

    __slots__ = ("_clean_urls", "_filesystem_first", "_index", "_rules", "_view")

    def __init__(
        self,
        view: TreeView,
        rules: RuleSet | None = None,
        *,
        index: str = "index.html",
        clean_urls: bool = False,
        filesystem_first: bool = False,
    ) -> None:
        self._view = view
        self._rules = rules if rules is not None else RuleSet()
        self._index = index
        self._clean_urls = clean_urls
        self._filesystem_first = filesystem_first

    @property
    def view(self) -> TreeView:
        return self._view

    @property
    def rules(self) -> RuleSet:
        return self._rules

    def resolve(self, request_path: str) -> Resolution:
        """Resolve one request path."""
        path = normalize_request_path(request_path)
        if path is None:
            logger.debug("Unaddressable request path %r", request_path)
            return NotFound(path=request_path)

        if self._filesystem_first:
            served = self._lookup(path, None)
            if served is not None:
                logger.debug("%s -> %s (file)", path, served.tree_path)
                return served

        rule: RewriteRule | None = None
        lookup = path
        rewrite = self._rules.match(path)
        if rewrite is not None:
            rule = rewrite.rule
            lookup = normalize_request_path(strip_query(rewrite.destination))
            if lookup is None:
                logger.debug("%s rewritten by %s to unaddressable %r", path, rule, rewrite.destination)
                return NotFound(path=rewrite.destination, rule=rule)

        served = self._lookup(lookup, rule)
        if served is None:
            logger.debug("%s -> not found (lookup %s)", path, lookup)
            return NotFound(path=lookup, rule=rule)
        logger.debug("%s -> %s", path, served.tree_path)
        return served

    def _lookup(self, path: str, rule: RewriteRule | None) -> Served | None:
        target = relative(path)
        candidates = [target, join(target, self._index)]
        if self._clean_urls and target:
            candidates.append(target + ".html")

        for candidate in candidates:
            ref = self._view.get(candidate)
            if ref is not None:
                return Served(
                    path=candidate,
                    tree_path=self._view.tree_path(candidate),
                    file=ref,
                    rule=rule,
                )
        return None
