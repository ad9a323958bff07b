"""Department lookup by code with a per-run cache."""
import logging

from ..domain_department import Department

logger = logging.getLogger(__name__)


def normalize_department_code(raw):
    return (str(raw) if raw is not None else "").strip().upper()


class DepartmentResolver:
    """Resolves roster department codes to active ``Department`` rows.

    Create one per import run: both hits and misses are cached for the life
    of the instance, so a file referencing the same code thousands of times
    costs one query (or none after ``prime``).
    """

    def __init__(self, queryset=None):
        self._queryset = queryset if queryset is not None else Department.objects.filter(is_active=True)
        self._cache = {}
        self.queries = 0

    def prime(self, codes):
        """Load every not-yet-cached code in one query."""
        wanted = {normalize_department_code(c) for c in codes} - set(self._cache) - {""}
        if not wanted:
            return
        self.queries += 1
        found = {d.code: d for d in self._queryset.filter(code__in=wanted)}
        for code in wanted:
            self._cache[code] = found.get(code)
        missing = wanted - set(found)
        if missing:
            logger.info("Unknown department codes in upload: %s", ", ".join(sorted(missing)))

    def resolve(self, raw_code):
        code = normalize_department_code(raw_code)
        if not code:
            return None
        if code not in self._cache:
            self.queries += 1
            self._cache[code] = self._queryset.filter(code=code).first()
        return self._cache[code]
