"""Selector tables for known job boards and generic page layouts."""

from __future__ import annotations

from .models import CompanySelector, SiteRule


def _title_after_at(title: str) -> str:
    # "Senior Engineer at Acme | Greenhouse" -> "Acme"
    if " at " not in title:
        return ""
    return title.rsplit(" at ", 1)[-1].split("|")[0].strip()


def _title_before_hiring(title: str) -> str:
    if " is hiring " not in title:
        return ""
    return title.split(" is hiring ", 1)[0].strip()


def _title_before_dash(title: str) -> str:
    if "-" not in title:
        return ""
    return title.split("-", 1)[0].strip()


LINKEDIN = SiteRule(
    name="linkedin",
    domain_match="linkedin.com",
    description_selectors=(
        ".description__text",
        ".show-more-less-html__markup",
        ".jobs-description__content",
        ".jobs-box__html-content",
        ".jobs-description",
        '[data-test-id="job-details"]',
        "#job-details",
        '[data-test-id="description"]',
        ".jobs-unified-top-card__job-insight",
        ".jobs-unified-top-card__description-container",
    ),
    company_selectors=(
        CompanySelector(".jobs-unified-top-card__company-name"),
        CompanySelector(".jobs-company__name"),
        CompanySelector(".topcard__org-name-link"),
        CompanySelector("[data-test-job-card-company-name]"),
    ),
)

INDEED = SiteRule(
    name="indeed",
    domain_match="indeed.com",
    description_selectors=(
        "#jobDescriptionText",
        ".jobsearch-jobDescriptionText",
        "#job-content",
        '[data-testid="jobDescriptionText"]',
        "#jobDescription",
        ".job-desc",
        "#jobDescriptionSection",
        ".job_description",
        "#job-details",
    ),
    company_selectors=(
        CompanySelector(".jobsearch-InlineCompanyRating div"),
        CompanySelector(".jobsearch-CompanyInfoContainer"),
        CompanySelector('[data-testid="inlineHeader-companyName"]'),
        CompanySelector(".jobsearch-JobInfoHeader-subtitle"),
    ),
)

GREENHOUSE = SiteRule(
    name="greenhouse",
    domain_match="greenhouse.io",
    description_selectors=(
        "#content",
        "#gh-job-content",
        ".content",
        '[data-test="description"]',
        "#job-content",
        ".job-description",
        "#job_description",
        ".job-app-body",
    ),
    company_selectors=(
        CompanySelector("title", transform=_title_after_at),
        CompanySelector(".company-name"),
        CompanySelector(".app-title"),
    ),
)

LEVER = SiteRule(
    name="lever",
    domain_match="lever.co",
    description_selectors=(
        ".posting-page",
        ".posting-category-content",
        "#job-content",
        ".section-wrapper",
        ".posting-requirements",
        ".posting-headline",
        ".posting",
    ),
    company_selectors=(
        CompanySelector(".posting-header h2"),
        CompanySelector(".job-title-company"),
        CompanySelector(".main-header-logo img", attribute="alt"),
        CompanySelector("title", transform=_title_before_hiring),
    ),
)

WORKDAY = SiteRule(
    name="workday",
    domain_match="workday.com",
    description_selectors=(
        ".job-description",
        "#job-description",
        ".job-posting-section",
        ".css-1k5wd3l",
        ".css-kyg8or",
        "[data-automation-id='jobPostingDescription']",
        "[data-automation-id='jobReqDescription']",
    ),
    company_selectors=(
        CompanySelector("title", transform=_title_before_dash),
        CompanySelector("[data-automation-id='jobPostingHeader']"),
        CompanySelector(".css-1k5wd3l h3"),
    ),
)

ZIPRECRUITER = SiteRule(
    name="ziprecruiter",
    domain_match="ziprecruiter.com",
    description_selectors=(
        ".job_description",
        "#job-description",
        ".jobDescriptionSection",
        ".job-details",
        ".description",
        "#description",
    ),
    company_selectors=(
        CompanySelector(".hiring_company"),
        CompanySelector(".company_name"),
        CompanySelector(".company-name"),
    ),
)

MONSTER = SiteRule(
    name="monster",
    domain_match="monster.com",
    description_selectors=(
        ".job-description",
        "#JobDescription",
        ".details-content",
        ".job-description-container",
        ".description-section",
    ),
    company_selectors=(
        CompanySelector(".company-name"),
        CompanySelector(".name"),
        CompanySelector(".job-company"),
    ),
)

# Order matters: a hostname matching several entries resolves to the first.
SITE_RULES: tuple[SiteRule, ...] = (
    LINKEDIN,
    INDEED,
    GREENHOUSE,
    LEVER,
    WORKDAY,
    ZIPRECRUITER,
    MONSTER,
)

GENERIC_DESCRIPTION_SELECTORS: tuple[str, ...] = (
    ".job-description",
    "#job-description",
    ".description",
    ".job-details",
    '[data-testid="jobDescriptionText"]',
    "article",
    ".posting-requirements",
    ".details",
    ".job-desc",
    "#job_description",
    ".job_description",
    ".description-section",
    ".job-overview",
    ".job-content",
    "main",
    ".main-content",
    '[role="main"]',
    "#main",
    ".content-main",
    '[data-test="description"]',
    '[data-test="job-description"]',
    ".job-posting-section",
    ".job-details-content",
    ".job-posting__description",
    "#content",
    ".content",
    ".job-posting",
    ".job-post",
    ".job",
    ".careers-job-description",
    ".careers-description",
    ".job-summary",
    ".summary",
    ".job-info",
    ".job-body",
    ".job-page",
    ".job-detail",
    ".job-details-description",
)

GENERIC_COMPANY_SELECTORS: tuple[str, ...] = (
    ".company-name",
    ".company",
    ".employer",
    ".organization",
    'meta[property="og:site_name"]',
    'meta[name="author"]',
    ".company-info",
    ".employer-info",
    "h1 + p",
    ".posting-company",
    'meta[property="og:title"]',
    'meta[name="title"]',
    ".job-company-name",
    '[data-test="company-name"]',
    ".job-company",
    ".employer-name",
    ".hiring-company",
    ".job-employer",
    'meta[name="twitter:site"]',
    'link[rel="publisher"]',
)

LARGEST_BLOCK_TAGS: tuple[str, ...] = ("div", "section", "article", "main", "p")


def match_site_rule(hostname: str, rules: tuple[SiteRule, ...] = SITE_RULES) -> SiteRule | None:
    """Return the first rule whose domain fragment occurs in *hostname*."""

    for rule in rules:
        if rule.matches(hostname):
            return rule
    return None
