import logging
from supabase import Client
from sermon_buddy.config.settings import settings
from sermon_buddy.core.context import RequestContext
from sermon_buddy.core.exceptions import RemoteFailure
from sermon_buddy.modules.search.engine import SearchEngine, clean_search_term
from sermon_buddy.modules.search.normalizer import normalize
from sermon_buddy.modules.search.schemas import SearchResponse
from sermon_buddy.modules.search.sequencer import SearchSequencer, search_sequencer
from typing import Optional

logger = logging.getLogger(__name__)


class SearchService:
    def __init__(
        self,
        supabase: Client,
        sequencer: Optional[SearchSequencer] = None,
        fail_fast: Optional[bool] = None,
        per_category_limit: Optional[int] = None
    ):
        self.engine = SearchEngine(supabase, per_category_limit=per_category_limit)
        self.sequencer = sequencer or search_sequencer
        self.fail_fast = settings.search_fail_fast if fail_fast is None else fail_fast

    async def search(self, term: Optional[str], ctx: RequestContext) -> SearchResponse:
        """
        Search people, churches and public sermon notes for term.

        Every call takes a sequence token for the caller first, so a blank term
        also supersedes a search still in flight. Results of a superseded search
        come back empty with stale=True. Failed categories are listed in
        failed_categories; the search itself fails only when no category
        succeeded (or on the first failure when fail_fast is set).
        """
        key = ctx.session_key
        token = self.sequencer.issue(key)
        query = clean_search_term(term)
        if not query:
            return SearchResponse(query="", token=token)

        outcomes = await self.engine.fan_out(query)
        if not self.sequencer.is_latest(key, token):
            logger.debug(f"Discarding stale search {token} for {key}")
            return SearchResponse(query=query, token=token, stale=True)

        failed = [outcome.kind for outcome in outcomes if not outcome.ok]
        if failed and (self.fail_fast or len(failed) == len(outcomes)):
            raise RemoteFailure("Search failed")

        results = normalize(outcomes)
        logger.debug(f"Search {token} for {key}: {len(results)} results, failed={[k.value for k in failed]}")
        return SearchResponse(query=query, token=token, results=results, failed_categories=failed)
