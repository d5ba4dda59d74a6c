import textwrap

import pytest

from feedwall.config import (
    DEFAULT_FEED_SOURCES,
    AppConfig,
    parse_app_config,
    parse_feeds_config,
)
from feedwall.models import FeedSource


def test_default_sources_are_absolute_urls():
    assert len(DEFAULT_FEED_SOURCES) == 4
    assert all(source.url.startswith("http://") for source in DEFAULT_FEED_SOURCES)
    assert AppConfig().sources == list(DEFAULT_FEED_SOURCES)


def test_parse_feeds_config_flattens_nested_outlines(tmp_path):
    opml = tmp_path / "feeds.xml"
    opml.write_text(
        textwrap.dedent(
            """\
            <opml version="2.0">
              <body>
                <outline text="Tech">
                  <outline type="rss" text="Eng Blog" xmlUrl="https://example.com/eng.xml" />
                </outline>
                <outline text="Standalone" type="rss" xmlUrl="https://example.com/standalone.xml" />
              </body>
            </opml>
            """
        ),
        encoding="utf-8",
    )

    sources = parse_feeds_config(str(opml))

    assert sources == [
        FeedSource(url="https://example.com/eng.xml", title="Eng Blog"),
        FeedSource(url="https://example.com/standalone.xml", title="Standalone"),
    ]


def test_parse_feeds_config_missing_body_raises(tmp_path):
    opml = tmp_path / "feeds.xml"
    opml.write_text("<opml version='2.0'></opml>", encoding="utf-8")

    with pytest.raises(ValueError):
        parse_feeds_config(str(opml))


def test_parse_app_config(tmp_path):
    (tmp_path / "feeds.xml").write_text(
        '<opml><body><outline type="rss" text="A" xmlUrl="https://a.example/rss" /></body></opml>',
        encoding="utf-8",
    )
    config_file = tmp_path / "config.xml"
    config_file.write_text(
        textwrap.dedent(
            """\
            <config>
                <feeds>feeds.xml</feeds>
                <limit>5</limit>
                <concurrency>2</concurrency>
                <timeout>3.5</timeout>
                <endpoint>https://api.example.com/load</endpoint>
                <callback></callback>
                <order>source</order>
                <logging>
                    <level>DEBUG</level>
                    <file>logs/app.log</file>
                </logging>
            </config>
            """
        ),
        encoding="utf-8",
    )

    config = parse_app_config(str(config_file))

    assert config.sources == [FeedSource(url="https://a.example/rss", title="A")]
    assert config.limit == 5
    assert config.concurrency == 2
    assert config.timeout == 3.5
    assert config.endpoint == "https://api.example.com/load"
    assert config.callback is None
    assert config.order == "source"
    assert config.logging.level == "DEBUG"
    assert config.logging.file == str((tmp_path / "logs" / "app.log").resolve())


def test_parse_app_config_defaults(tmp_path):
    config_file = tmp_path / "config.xml"
    config_file.write_text("<config />", encoding="utf-8")

    config = parse_app_config(str(config_file))

    assert config == AppConfig()


def test_parse_app_config_missing_file():
    with pytest.raises(FileNotFoundError):
        parse_app_config("does-not-exist.xml")


@pytest.mark.parametrize(
    "body",
    [
        "<limit>0</limit>",
        "<limit>ten</limit>",
        "<order>random</order>",
        "<timeout>-1</timeout>",
        "<timeout>0</timeout>",
        "<timeout>nan</timeout>",
        "<timeout>inf</timeout>",
        "<timeout>soon</timeout>",
    ],
)
def test_parse_app_config_rejects_invalid_values(tmp_path, body):
    config_file = tmp_path / "config.xml"
    config_file.write_text(f"<config>{body}</config>", encoding="utf-8")

    with pytest.raises(ValueError):
        parse_app_config(str(config_file))


def test_parse_app_config_timeout_none_disables_timeout(tmp_path):
    config_file = tmp_path / "config.xml"
    config_file.write_text("<config><timeout>none</timeout></config>", encoding="utf-8")

    assert parse_app_config(str(config_file)).timeout is None
