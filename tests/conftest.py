"""Pytest fixtures for article-importer tests."""

from pathlib import Path

import pytest

from article_importer.config import ImportConfiguration
from article_importer.discovery import ArticleEntry, ArticleVersion
from article_importer.entities import EntityResolutionCache
from article_importer.parsers import XMLDocument
from article_importer.repository import InMemoryRepository
from schemas import Context, User

JATS_DOCTYPE = (
    '<!DOCTYPE article PUBLIC "-//NLM//DTD JATS (Z39.96) Journal Publishing DTD v1.2 20190208//EN" '
    '"http://jats.nlm.nih.gov/publishing/1.2/JATS-journalpublishing1.dtd">'
)

DEFAULT_CONTRIBS = """
      <contrib-group>
        <contrib contrib-type="author">
          <name><surname>Doe</surname><given-names>Jane</given-names></name>
          <xref ref-type="aff" rid="aff1"/>
          <xref ref-type="corresp" rid="cor1"/>
        </contrib>
        <contrib contrib-type="author">
          <name><surname>Roe</surname><given-names>Richard</given-names></name>
          <contrib-id contrib-id-type="orcid">https://orcid.org/0000-0002-1825-0097</contrib-id>
          <xref ref-type="aff" rid="aff1"/>
        </contrib>
        <aff id="aff1"><institution>University of Testing</institution></aff>
      </contrib-group>
      <author-notes><corresp id="cor1"><email>jane@example.org</email></corresp></author-notes>"""


@pytest.fixture
def jats_xml():
    """Factory building JATS article metadata."""

    def build(
        title: str = "Example",
        publisher_id: str = "art-1",
        doi: str | None = None,
        volume: str = "1",
        issue: str = "1",
        pub_date: tuple[str, str, str] | None = ("2020", "03", "15"),
        contribs: str = DEFAULT_CONTRIBS,
        categories: str = "",
        body: str = "",
        back: str = "",
        extra_meta: str = "",
        lang: str = "en",
        doctype: str = JATS_DOCTYPE,
    ) -> str:
        doi_node = f'<article-id pub-id-type="doi">{doi}</article-id>' if doi else ""
        date_node = ""
        if pub_date:
            year, month, day = pub_date
            date_node = (
                f'<pub-date pub-type="epub"><day>{day}</day><month>{month}</month>'
                f"<year>{year}</year></pub-date>"
            )
        return f"""<?xml version="1.0" encoding="UTF-8"?>
{doctype}
<article xmlns:xlink="http://www.w3.org/1999/xlink" xml:lang="{lang}">
  <front>
    <journal-meta>
      <journal-title-group><journal-title>Journal of Tests</journal-title></journal-title-group>
    </journal-meta>
    <article-meta>
      <article-id pub-id-type="publisher-id">{publisher_id}</article-id>
      {doi_node}
      {categories}
      <title-group><article-title>{title}</article-title></title-group>
      {contribs}
      {date_node}
      <volume>{volume}</volume>
      <issue>{issue}</issue>
      <fpage>1</fpage>
      <lpage>10</lpage>
      <permissions>
        <copyright-statement>Copyright 2020 the authors</copyright-statement>
        <copyright-holder>The Authors</copyright-holder>
        <license xlink:href="https://creativecommons.org/licenses/by/4.0/"/>
      </permissions>
      <abstract><p>An <italic>important</italic> result.</p></abstract>
      <kwd-group xml:lang="en"><kwd>testing</kwd><kwd>imports</kwd></kwd-group>
      {extra_meta}
    </article-meta>
  </front>
  {body}
  {back}
</article>
"""

    return build


@pytest.fixture
def aplusplus_xml():
    """Factory building A++ article metadata."""

    def build(
        title: str = "An A++ Article",
        article_id: str | None = "s10000-019-0001-1",
        doi: str | None = "10.1007/s10000-019-0001-1",
        online_date: tuple[str, str, str] | None = ("2019", "6", "1"),
        issue_date: tuple[str, str, str] | None = ("2019", "7", "1"),
        grants: str = '<MetadataGrant Grant="OpenAccess"/><BodyPDFGrant Grant="OpenAccess"/>',
        authors: str | None = None,
    ) -> str:
        id_attr = f' ID="{article_id}"' if article_id else ""
        doi_node = f"<ArticleDOI>{doi}</ArticleDOI>" if doi else ""
        online = ""
        if online_date:
            year, month, day = online_date
            online = f"<OnlineDate><Year>{year}</Year><Month>{month}</Month><Day>{day}</Day></OnlineDate>"
        issue_history = ""
        if issue_date:
            year, month, day = issue_date
            issue_history = (
                "<IssueInfo><IssueHistory><CoverDate>"
                f"<Year>{year}</Year><Month>{month}</Month><Day>{day}</Day>"
                "</CoverDate></IssueHistory></IssueInfo>"
            )
        if authors is None:
            authors = """
              <Author AffiliationIDS="Aff1">
                <AuthorName>
                  <GivenName>Jane</GivenName><GivenName>Q.</GivenName>
                  <Particle>van</Particle><FamilyName>Doe</FamilyName>
                </AuthorName>
                <Contact><Email>jane@example.org</Email></Contact>
              </Author>
              <Author>
                <AuthorName><FamilyName>Plato</FamilyName></AuthorName>
              </Author>
              <Affiliation ID="Aff1"><OrgName>University of Testing</OrgName></Affiliation>"""
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<Publisher>
  <Journal>
    <Volume>
      <Issue>
        {issue_history}
        <Article{id_attr}>
          <ArticleInfo Language="En">
            {doi_node}
            <ArticleCategory>ORIGINAL PAPER</ArticleCategory>
            <ArticleTitle Language="En">{title}</ArticleTitle>
            <ArticleFirstPage>5</ArticleFirstPage>
            <ArticleLastPage>9</ArticleLastPage>
            <ArticleHistory>
              <RegistrationDate><Year>2019</Year><Month>1</Month><Day>10</Day></RegistrationDate>
              {online}
            </ArticleHistory>
            <ArticleCopyright>
              <CopyrightHolderName>Springer Nature</CopyrightHolderName>
              <CopyrightYear>2019</CopyrightYear>
            </ArticleCopyright>
            <ArticleGrants Type="Regular">{grants}</ArticleGrants>
          </ArticleInfo>
          <ArticleHeader>
            <AuthorGroup>{authors}</AuthorGroup>
            <Abstract Language="En">
              <Heading>Abstract</Heading>
              <Para>We study <Emphasis>things</Emphasis>.</Para>
            </Abstract>
            <KeywordGroup Language="En">
              <Heading>Keywords</Heading>
              <Keyword>alpha</Keyword>
              <Keyword>beta</Keyword>
            </KeywordGroup>
          </ArticleHeader>
        </Article>
      </Issue>
    </Volume>
  </Journal>
</Publisher>
"""

    return build


@pytest.fixture
def import_root(tmp_path):
    root = tmp_path / "import"
    root.mkdir()
    return root


@pytest.fixture
def make_article(import_root):
    """Factory writing an article version directory.

    Returns the version directory. Without a version number the files go
    straight into the article directory (implicit version 1).
    """

    def build(
        volume: str = "1",
        issue: str = "1",
        article: str = "1",
        xml: str | None = None,
        version: int | None = None,
        files: dict[str, bytes | str] | None = None,
        xml_name: str = "article.xml",
    ) -> Path:
        directory = import_root / volume / issue / article
        if version is not None:
            directory = directory / str(version)
        directory.mkdir(parents=True, exist_ok=True)
        if xml is not None:
            (directory / xml_name).write_text(xml, encoding="utf-8")
        for name, content in (files or {}).items():
            path = directory / name
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, str):
                path.write_text(content, encoding="utf-8")
            else:
                path.write_bytes(content)
        return directory

    return build


@pytest.fixture
def repository():
    """In-memory repository seeded with a bilingual journal and its accounts."""
    repository = InMemoryRepository()
    repository.add_context(
        Context(
            id=0,
            path="journal",
            name={"en": "Journal of Tests", "fr_CA": "Revue des tests"},
            primary_locale="en",
            supported_locales=["en", "fr_CA"],
            user_groups={"author": 14, "editor": 3},
        )
    )
    repository.add_user(User(id=0, username="importer", email="importer@example.org"))
    repository.add_user(
        User(id=0, username="editor", email="editor@example.org", roles=["editor"])
    )
    return repository


@pytest.fixture
def configuration(import_root):
    return ImportConfiguration(
        context_path="journal",
        username="importer",
        editor_username="editor",
        email="imports@example.org",
        import_path=import_root,
    )


@pytest.fixture
def import_context(configuration, repository):
    return configuration.resolve(repository)


@pytest.fixture
def cache(repository, import_context):
    return EntityResolutionCache(repository, import_context.context.id)


@pytest.fixture
def make_version(make_article):
    """Factory writing an article version and returning its ArticleVersion."""

    def build(**kwargs) -> ArticleVersion:
        directory = make_article(**kwargs)
        article_dir = directory if kwargs.get("version") is None else directory.parent
        return next(
            v for v in ArticleEntry(article_dir).versions() if v.directory == directory
        )

    return build


@pytest.fixture
def make_parser(import_context, repository, cache):
    """Factory building a parser for an article version."""

    def build(parser_class, version: ArticleVersion, html_transformer=None):
        document = XMLDocument.load(version.files.metadata_file)
        return parser_class(
            import_context, version, document, repository, cache, html_transformer=html_transformer
        )

    return build
