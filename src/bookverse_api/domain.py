import typing
from typing import Annotated, Literal

from pydantic import Field

if typing.TYPE_CHECKING:
    BookId = typing.NewType("BookId", int)
    UserId = typing.NewType("UserId", int)
    ReviewId = typing.NewType("ReviewId", int)
    Rating = typing.NewType("Rating", int)
else:
    _PositiveInt = Annotated[int, Field(gt=0)]
    BookId = typing.NewType("BookId", _PositiveInt)
    UserId = typing.NewType("UserId", _PositiveInt)
    ReviewId = typing.NewType("ReviewId", _PositiveInt)

    _RatingInt = Annotated[int, Field(ge=1, le=5)]
    Rating = typing.NewType("Rating", _RatingInt)

RecommendationMode = Literal["hybrid", "toprated", "llm"]

BookOrdering = Literal["published_year_desc", "avg_rating_desc", "review_count_desc"]
