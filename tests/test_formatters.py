"""Tests for wxbot.formatters."""

from datetime import date, datetime, timezone

import pytest
import pytz

from wxbot.formatters import (
    AQI_UNKNOWN,
    aqi_info,
    bucket_by_day,
    dominant_condition,
    footer_text,
    format_current,
    format_forecast,
    format_help,
    format_hour,
    format_hourly_breakdown,
    format_location_list,
    format_saved_locations,
    format_time,
    get_weather_map_urls,
    icon_image_url,
    is_daytime,
    round_half_away,
    round_half_up,
    summarize_day,
    weather_color,
    weather_emoji,
    wind_direction,
)
from wxbot.models import DEFAULT_COLOR, WeatherCondition
from tests.conftest import BASE_TIME, make_entry, make_forecast, make_weather

NOW = datetime.fromtimestamp(BASE_TIME, tz=timezone.utc)


def _conditions(*ids):
    return [WeatherCondition(id=cid) for cid in ids]


class TestRounding:
    """Tests for round_half_up() and round_half_away()."""

    @pytest.mark.parametrize("value,expected", [
        (2.5, 3), (2.49, 2), (-2.5, -2), (-2.51, -3), (0.5, 1), (55.4, 55),
    ])
    def test_half_rounds_up(self, value, expected):
        assert round_half_up(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (2.5, 3), (-2.5, -3), (-2.49, -2), (-0.4, 0), (0.5, 1), (63.8, 64),
    ])
    def test_half_rounds_away_from_zero(self, value, expected):
        assert round_half_away(value) == expected


class TestWindDirection:
    """Tests for wind_direction()."""

    @pytest.mark.parametrize("degrees,expected", [
        (0, "N"), (180, "S"), (202.5, "SSW"), (11.24, "N"), (11.25, "NNE"), (90, "E"), (225, "SW"),
        (348.74, "NNW"), (348.75, "N"), (360, "N"),
    ])
    def test_sixteen_point_compass(self, degrees, expected):
        assert wind_direction(degrees) == expected


class TestConditionStyling:
    """Tests for weather_color() and weather_emoji()."""

    @pytest.mark.parametrize("condition_id,expected", [
        (211, 0x5A5A5A), (301, 0x89CFF0), (502, 0x0066CC), (601, 0xFFFFFF),
        (741, 0xAAAAAA), (800, 0xFFD700), (804, 0x87CEEB), (100, DEFAULT_COLOR),
    ])
    def test_color_by_code(self, condition_id, expected):
        assert weather_color(condition_id) == expected

    @pytest.mark.parametrize("condition_id,expected", [
        (211, "⚡"), (301, "🌧️"), (502, "🌧️"), (601, "❄️"), (741, "🌫️"), (800, "☀️"), (802, "⛅"), (0, "☁️"),
    ])
    def test_emoji_by_code(self, condition_id, expected):
        assert weather_emoji(condition_id) == expected

    @pytest.mark.parametrize("condition_id,color,emoji", [
        (199, DEFAULT_COLOR, "☁️"), (200, 0x5A5A5A, "⚡"), (299, 0x5A5A5A, "⚡"), (300, 0x89CFF0, "🌧️"),
        (799, 0xAAAAAA, "🌫️"), (800, 0xFFD700, "☀️"), (801, 0x87CEEB, "⛅"),
    ])
    def test_range_boundaries(self, condition_id, color, emoji):
        assert weather_color(condition_id) == color
        assert weather_emoji(condition_id) == emoji


class TestAirQuality:
    """Tests for aqi_info()."""

    def test_known_levels(self):
        assert aqi_info(1).label == "Good"
        assert aqi_info(3).label == "Moderate"
        assert aqi_info(5).emoji == "🟣"

    @pytest.mark.parametrize("aqi", [None, 0, 6])
    def test_unknown_levels(self, aqi):
        assert aqi_info(aqi) is AQI_UNKNOWN


class TestDominantCondition:
    """Tests for dominant_condition()."""

    def test_empty_returns_none(self):
        assert dominant_condition([]) is None

    def test_lower_id_wins(self):
        assert dominant_condition(_conditions(803, 801)).id == 801
        assert dominant_condition(_conditions(500, 211)).id == 211

    def test_order_independent_for_rain_and_clouds(self):
        assert dominant_condition(_conditions(801, 501)).id == 501
        assert dominant_condition(_conditions(501, 801)).id == 501
        assert dominant_condition(_conditions(801, 601)).id == 601
        assert dominant_condition(_conditions(801, 200)).id == 200

    def test_rain_replaces_clear(self):
        assert dominant_condition(_conditions(800, 500)).id == 500

    def test_snow_replaces_clouds(self):
        assert dominant_condition(_conditions(802, 600)).id == 600

    def test_clear_never_replaces_rain(self):
        assert dominant_condition(_conditions(500, 800, 804)).id == 500

    def test_atmosphere_follows_plain_ordering(self):
        assert dominant_condition(_conditions(701, 500)).id == 500
        assert dominant_condition(_conditions(500, 701)).id == 500


class TestDayBuckets:
    """Tests for bucket_by_day() and summarize_day()."""

    def test_buckets_split_at_local_midnight_utc(self):
        entries = [make_entry(h, 50) for h in (0, 3, 6, 9, 12)]
        buckets = bucket_by_day(entries, 0)
        assert [b.day for b in buckets] == [date(2024, 6, 3), date(2024, 6, 4)]
        assert len(buckets[0].entries) == 4
        assert len(buckets[1].entries) == 1

    def test_buckets_use_location_offset(self):
        # 12:00 and 06:00+1d UTC are both June 3rd at UTC-7
        entries = [make_entry(0, 50), make_entry(18, 52)]
        assert len(bucket_by_day(entries, 0)) == 2
        buckets = bucket_by_day(entries, -25200)
        assert len(buckets) == 1
        assert buckets[0].day == date(2024, 6, 3)

    def test_summary(self):
        bucket = bucket_by_day(make_forecast().entries, 0)[0]
        summary = summarize_day(bucket)
        assert summary.min_temp == 58
        assert summary.max_temp == 64
        assert summary.precip_percent == 40
        assert summary.condition.id == 500

    def test_summary_without_precipitation(self):
        bucket = bucket_by_day([make_entry(0, 40), make_entry(3, 45)], 0)[0]
        assert summarize_day(bucket).precip_percent is None

    def test_summary_rounds_sub_zero_halves_away_from_zero(self):
        bucket = bucket_by_day([make_entry(0, -2.5), make_entry(3, 10.5)], 0)[0]
        summary = summarize_day(bucket)
        assert summary.min_temp == -3
        assert summary.max_temp == 11


class TestTimeHelpers:
    """Tests for time formatting helpers."""

    def test_format_time_uses_location_offset(self):
        assert format_time(BASE_TIME, 0) == "12:00 PM"
        assert format_time(BASE_TIME, -25200) == "05:00 AM"

    def test_format_hour_has_no_leading_zero(self):
        assert format_hour(BASE_TIME + 3 * 3600, 0) == "3 PM"
        assert format_hour(BASE_TIME, 0) == "12 PM"

    def test_footer_uses_configured_timezone(self):
        now = datetime(2024, 6, 3, 12, 0, 5, tzinfo=timezone.utc)
        assert footer_text(pytz.utc, now) == "Data provided by OpenWeatherMap • Updated 12:00:05 PM"
        assert footer_text(pytz.timezone("America/Los_Angeles"), now).endswith("Updated 05:00:05 AM")

    def test_is_daytime(self):
        assert is_daytime(100, 200, 150) is True
        assert is_daytime(100, 200, 250) is False
        assert is_daytime(None, 200, 150) is None


class TestLinks:
    """Tests for map and icon URLs."""

    def test_map_urls_have_three_layers(self):
        urls = get_weather_map_urls(47.6, -122.3, "https://maps.example/wm")
        assert set(urls) == {"rain", "temp", "cloud"}
        assert urls["rain"].startswith("https://maps.example/wm?")
        assert "lat=47.6" in urls["temp"] and "lon=-122.3" in urls["temp"]

    def test_icon_url(self):
        assert icon_image_url("10d") == "https://openweathermap.org/img/wn/10d@4x.png"
        assert icon_image_url("") is None


class TestFormatCurrent:
    """Tests for format_current()."""

    def test_title_color_and_thumbnail(self):
        payload = format_current(make_weather(), now=NOW)
        assert payload.title == "☀️ Weather in Portland, Oregon, US"
        assert payload.color == 0xFFD700
        assert payload.thumbnail_url == "https://openweathermap.org/img/wn/01d@4x.png"
        assert payload.timestamp == NOW

    def test_description_sections(self):
        payload = format_current(make_weather(), now=NOW)
        assert payload.description.startswith("**Clear sky** ☀️")
        assert "🌡️ **Temperature:** 55°F (Feels like 54°F)" in payload.description
        assert "🌬️ **Wind:** 5 mph SW" in payload.description
        assert "### Sun Times" in payload.description

    def test_fields_with_air_quality(self):
        payload = format_current(make_weather(), now=NOW)
        assert [f.name for f in payload.fields] == ["Air Quality", "Weather Maps"]
        assert "Fair (2/5)" in payload.fields[0].value
        assert "PM2.5: 4.1" in payload.fields[0].value

    def test_fields_with_rain_and_no_air_quality(self):
        payload = format_current(make_weather(air_quality=None, rain_1h=0.42), now=NOW)
        assert [f.name for f in payload.fields] == ["Precipitation", "Weather Maps"]
        assert "0.42 mm" in payload.fields[0].value

    def test_rainy_portland(self):
        weather = make_weather(condition=WeatherCondition(id=500, description="light rain", icon="10d"), temp=55.4)
        payload = format_current(weather, now=NOW)
        assert payload.title == "🌧️ Weather in Portland, Oregon, US"
        assert payload.color == 0x0066CC
        assert payload.description.startswith("**Light rain**")
        assert "**Temperature:** 55°F" in payload.description

    def test_night_marker(self):
        payload = format_current(make_weather(sunset=BASE_TIME - 60), now=NOW)
        assert payload.description.startswith("**Clear sky** 🌙")

    def test_missing_state_omitted(self):
        payload = format_current(make_weather(state=None), now=NOW)
        assert payload.title == "☀️ Weather in Portland, US"


class TestFormatSavedLocations:
    """Tests for format_saved_locations()."""

    def test_one_field_per_location_plus_hint(self):
        payload = format_saved_locations([make_weather("Portland"), make_weather("Salem")], "!weather", now=NOW)
        assert payload.title == "📍 Weather for Your Saved Locations"
        names = [f.name for f in payload.fields]
        assert names == ["☀️ Portland, Oregon, US", "☀️ Salem, Oregon, US", "Need more details?"]
        assert "`!weather <location_name>`" in payload.fields[-1].value

    def test_aqi_label_in_stats_line(self):
        payload = format_saved_locations([make_weather()], now=NOW)
        assert "AQI: Fair" in payload.fields[0].value

    def test_missing_humidity_is_omitted(self):
        payload = format_saved_locations([make_weather(humidity=None)], now=NOW)
        value = payload.fields[0].value
        assert "Humidity" not in value
        assert "None%" not in value
        assert "🌬️ **Wind:**" in value


class TestFormatForecast:
    """Tests for format_forecast() and format_hourly_breakdown()."""

    def test_overview_lines(self):
        payload = format_forecast(make_forecast(), now=NOW)
        assert payload.title == "🌧️ 5-Day Forecast for Seattle, US"
        assert ("**Mon, Jun 3**: 🌧️ Light rain, 🌡️ 58°F to 64°F ☔ 40% chance of precipitation"
                in payload.description)
        assert payload.fields[-1].name == "Weather Maps"

    def test_resolved_location_overrides_city(self):
        forecast = make_forecast(location_name="Seattle", location_state="Washington", location_country="US")
        payload = format_forecast(forecast, now=NOW)
        assert payload.title == "🌧️ 5-Day Forecast for Seattle, Washington, US"

    def test_empty_forecast(self):
        payload = format_forecast(make_forecast(entries=[]), now=NOW)
        assert "No forecast entries available." in payload.description
        assert payload.thumbnail_url is None

    def test_hourly_breakdown(self):
        text = format_hourly_breakdown(make_forecast())
        lines = text.split("\n")
        assert lines[0] == "## 🌧️ Today's Hourly Forecast: Monday, Jun 3"
        assert "**12 PM**: ☀️ 60°F - Clear sky" in lines
        assert "**3 PM**: 🌧️ 64°F - Light rain (40% chance of precipitation)" in lines

    def test_hourly_breakdown_respects_limit(self):
        entries = [make_entry(h, 50) for h in (0, 1, 2, 3, 4, 5, 6, 7)]
        text = format_hourly_breakdown(make_forecast(entries=entries), limit=3)
        assert len([line for line in text.split("\n") if line.startswith("**")]) == 3

    def test_hourly_breakdown_empty(self):
        assert format_hourly_breakdown(make_forecast(entries=[])) is None


class TestSimplePanels:
    """Tests for format_location_list() and format_help()."""

    def test_location_list_numbered(self):
        payload = format_location_list(["Seattle", "Portland, OR"], now=NOW)
        assert payload.title == "Saved Locations"
        assert payload.description == "1. Seattle\n2. Portland, OR"

    def test_help_skips_empty_sections(self):
        payload = format_help([("A", ["one"]), ("B", [])], "footer", now=NOW)
        assert [f.name for f in payload.fields] == ["A"]
        assert payload.footer == "footer"
