from datetime import date, datetime, timedelta

from finfocus.domain import NewsCategory
from finfocus.news import NewsAPIResponse, NewsTimeframe, convert_api_article
from finfocus.periods import TimePeriod, last_month_range, month_range, week_range, year_range


def test_week_starts_on_monday():
    start, end = week_range(datetime(2025, 5, 14, 15, 45))

    assert start == datetime(2025, 5, 12)
    assert end == datetime(2025, 5, 18, 23, 59, 59, 999999)


def test_month_range_rolls_over_year():
    start, end = month_range(datetime(2025, 12, 10))

    assert start == datetime(2025, 12, 1)
    assert end == datetime(2025, 12, 31, 23, 59, 59, 999999)


def test_year_range():
    assert year_range(datetime(2024, 2, 29)) == (datetime(2024, 1, 1), datetime(2024, 12, 31, 23, 59, 59, 999999))


def test_last_month_range():
    assert last_month_range(date(2025, 3, 15)) == (date(2025, 2, 1), date(2025, 2, 28))
    assert last_month_range(date(2025, 1, 1)) == (date(2024, 12, 1), date(2024, 12, 31))


def test_time_period_ranges():
    now = datetime(2025, 5, 14, 9)

    assert TimePeriod.THIS_MONTH.date_range(now)[0] == datetime(2025, 5, 1)
    assert TimePeriod.ALL.date_range(now) == (datetime.min, datetime.max)


def test_news_timeframe_cutoffs():
    now = datetime(2025, 5, 14, 9, 30)

    assert NewsTimeframe.LAST_HOUR.cutoff(now) == now - timedelta(hours=1)
    assert NewsTimeframe.TODAY.cutoff(now) == datetime(2025, 5, 14)
    assert NewsTimeframe.THIS_WEEK.cutoff(now) == datetime(2025, 5, 12)
    assert NewsTimeframe.THIS_MONTH.cutoff(now) == datetime(2025, 5, 1)
    assert NewsTimeframe.ALL.cutoff(now) == datetime.min


def make_payload():
    return {
        "status": "ok",
        "totalResults": 2,
        "articles": [
            {
                "source": {"id": None, "name": "Reuters"},
                "title": "Markets open higher",
                "url": "https://example.com/a",
                "publishedAt": "2025-05-14T08:00:00Z",
                "urlToImage": "https://example.com/a.png",
            },
            {
                "source": {"name": "Bloomberg"},
                "title": "Bad timestamp",
                "url": "https://example.com/b",
                "publishedAt": "yesterday",
                "description": "Something happened",
            },
        ],
    }


def test_api_response_parsing():
    response = NewsAPIResponse.from_dict(make_payload())

    assert response.status == "ok"
    assert response.total_results == 2
    assert response.articles[0].source.name == "Reuters"
    assert response.articles[0].url_to_image == "https://example.com/a.png"


def test_convert_api_article():
    first, second = NewsAPIResponse.from_dict(make_payload()).articles

    article = convert_api_article(first)
    assert article.summary == "No summary available"
    assert article.category == NewsCategory.BUSINESS
    assert article.article_url == "https://example.com/a"
    assert article.published_date.tzinfo is None

    assert convert_api_article(second) is None
