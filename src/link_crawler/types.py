from typing import TypedDict, List, Optional
from pydantic import BaseModel, ConfigDict


# TypedDicts for internal use
class CrawlTask(TypedDict):
    url: str
    depth: int  # hops still allowed below this page
    is_seed: bool


# Pydantic models for reporting
class FetchFailure(BaseModel):
    url: str
    kind: str
    detail: str = ""
    status_code: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class CrawlReport(BaseModel):
    seed: str
    max_depth: int
    visited: List[str] = []
    failures: List[FetchFailure] = []
    cancelled: bool = False

    def summary(self) -> str:
        text = f"{len(self.visited)} URLs visited successfully, {len(self.failures)} fetch failures encountered"
        if self.cancelled:
            text += " (crawl cancelled, results are partial)"
        return text
