from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request/response body with camelCase JSON field names."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


def format_score(home_goals, away_goals):
    """Render a score the way the web client shows it, e.g. "2-1"."""
    if home_goals is None or away_goals is None:
        return None
    return f"{home_goals}-{away_goals}"
