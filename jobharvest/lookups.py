"""
Static lookup tables used by candidate generation and normalization.

Everything here is immutable: mappings are wrapped in MappingProxyType and
sequences are tuples so callers cannot mutate shared state.
"""

import re
from types import MappingProxyType

UNKNOWN_COUNTRY_CODE = "XX"
UNKNOWN_REGION = "unknown"
UNKNOWN_LOCATION = "Unknown"

# Country name (or common alias) -> ISO 3166-1 alpha-2
COUNTRY_CODES = MappingProxyType({
    "united arab emirates": "AE", "uae": "AE", "dubai": "AE", "abu dhabi": "AE",
    "saudi arabia": "SA", "qatar": "QA", "bahrain": "BH", "oman": "OM", "kuwait": "KW",
    "china": "CN", "hong kong": "HK", "japan": "JP", "south korea": "KR", "korea": "KR",
    "thailand": "TH", "vietnam": "VN", "malaysia": "MY", "singapore": "SG",
    "indonesia": "ID", "philippines": "PH", "taiwan": "TW", "india": "IN",
    "egypt": "EG", "morocco": "MA", "nigeria": "NG", "kenya": "KE", "south africa": "ZA",
    "ghana": "GH", "tanzania": "TZ", "ethiopia": "ET", "uganda": "UG", "rwanda": "RW",
    "united kingdom": "GB", "uk": "GB", "england": "GB", "scotland": "GB", "wales": "GB",
    "germany": "DE", "france": "FR", "spain": "ES", "italy": "IT", "netherlands": "NL",
    "switzerland": "CH", "austria": "AT", "belgium": "BE", "portugal": "PT", "ireland": "IE",
    "sweden": "SE", "norway": "NO", "denmark": "DK", "finland": "FI", "poland": "PL",
    "czech republic": "CZ", "czechia": "CZ", "hungary": "HU", "romania": "RO",
    "greece": "GR", "turkey": "TR", "russia": "RU", "ukraine": "UA",
    "united states": "US", "usa": "US", "canada": "CA", "mexico": "MX",
    "brazil": "BR", "argentina": "AR", "chile": "CL", "colombia": "CO", "peru": "PE",
    "australia": "AU", "new zealand": "NZ",
    "cambodia": "KH", "myanmar": "MM", "laos": "LA", "brunei": "BN",
    "pakistan": "PK", "bangladesh": "BD", "sri lanka": "LK", "nepal": "NP",
    "jordan": "JO", "lebanon": "LB", "iraq": "IQ", "iran": "IR", "israel": "IL",
    "luxembourg": "LU", "monaco": "MC", "malta": "MT", "cyprus": "CY",
    "georgia": "GE", "armenia": "AM", "azerbaijan": "AZ", "uzbekistan": "UZ", "kazakhstan": "KZ",
    "costa rica": "CR", "panama": "PA", "ecuador": "EC", "uruguay": "UY", "paraguay": "PY",
    "bolivia": "BO", "venezuela": "VE", "guatemala": "GT", "honduras": "HN",
    "el salvador": "SV", "nicaragua": "NI", "dominican republic": "DO", "jamaica": "JM",
    "trinidad and tobago": "TT", "puerto rico": "PR", "cuba": "CU", "haiti": "HT",
    "senegal": "SN", "ivory coast": "CI", "cameroon": "CM", "mozambique": "MZ",
    "zambia": "ZM", "zimbabwe": "ZW", "botswana": "BW", "namibia": "NA", "madagascar": "MG",
    "mauritius": "MU", "angola": "AO", "democratic republic of congo": "CD", "congo": "CG",
    "tunisia": "TN", "algeria": "DZ", "libya": "LY", "sudan": "SD",
    "mongolia": "MN", "fiji": "FJ", "papua new guinea": "PG",
})

COUNTRY_REGIONS = MappingProxyType({
    "AE": "middle-east", "SA": "middle-east", "QA": "middle-east", "BH": "middle-east",
    "OM": "middle-east", "KW": "middle-east", "JO": "middle-east", "LB": "middle-east",
    "IQ": "middle-east", "IR": "middle-east", "IL": "middle-east",
    "CN": "east-asia", "HK": "east-asia", "JP": "east-asia", "KR": "east-asia",
    "TW": "east-asia", "MN": "east-asia",
    "TH": "southeast-asia", "VN": "southeast-asia", "MY": "southeast-asia", "SG": "southeast-asia",
    "ID": "southeast-asia", "PH": "southeast-asia", "KH": "southeast-asia", "MM": "southeast-asia",
    "LA": "southeast-asia", "BN": "southeast-asia",
    "IN": "south-asia", "PK": "south-asia", "BD": "south-asia", "LK": "south-asia", "NP": "south-asia",
    "KZ": "central-asia", "UZ": "central-asia", "GE": "central-asia", "AM": "central-asia",
    "AZ": "central-asia",
    "GB": "europe", "DE": "europe", "FR": "europe", "ES": "europe", "IT": "europe", "NL": "europe",
    "CH": "europe", "AT": "europe", "BE": "europe", "PT": "europe", "IE": "europe", "SE": "europe",
    "NO": "europe", "DK": "europe", "FI": "europe", "PL": "europe", "CZ": "europe", "HU": "europe",
    "RO": "europe", "GR": "europe", "TR": "europe", "RU": "europe", "UA": "europe", "SK": "europe",
    "BG": "europe", "LU": "europe", "CY": "europe", "MT": "europe", "MC": "europe", "AL": "europe",
    "EG": "africa", "MA": "africa", "NG": "africa", "KE": "africa", "ZA": "africa", "GH": "africa",
    "TZ": "africa", "ET": "africa", "UG": "africa", "RW": "africa", "SN": "africa", "CI": "africa",
    "CM": "africa", "MZ": "africa", "ZM": "africa", "ZW": "africa", "BW": "africa", "NA": "africa",
    "MG": "africa", "MU": "africa", "AO": "africa", "CD": "africa", "CG": "africa", "TN": "africa",
    "DZ": "africa", "LY": "africa", "SD": "africa",
    "US": "north-america", "CA": "north-america", "MX": "north-america",
    "BR": "central-south-america", "AR": "central-south-america", "CL": "central-south-america",
    "CO": "central-south-america", "PE": "central-south-america", "CR": "central-south-america",
    "PA": "central-south-america", "EC": "central-south-america", "UY": "central-south-america",
    "PY": "central-south-america", "BO": "central-south-america", "VE": "central-south-america",
    "GT": "central-south-america", "HN": "central-south-america", "SV": "central-south-america",
    "NI": "central-south-america",
    "JM": "caribbean", "TT": "caribbean", "DO": "caribbean", "CU": "caribbean",
    "HT": "caribbean", "PR": "caribbean",
    "AU": "oceania", "NZ": "oceania", "FJ": "oceania", "PG": "oceania",
})

# Local suffixes, most education-specific first
COUNTRY_TLDS = MappingProxyType({
    "AE": ("ae", "sch.ae"),
    "AR": ("edu.ar", "com.ar"),
    "AT": ("at", "ac.at"),
    "AU": ("edu.au", "com.au"),
    "AZ": ("az",),
    "BD": ("edu.bd",),
    "BE": ("be",),
    "BG": ("bg",),
    "BH": ("bh", "edu.bh"),
    "BN": ("edu.bn",),
    "BO": ("edu.bo",),
    "BR": ("com.br", "org.br"),
    "CA": ("ca",),
    "CH": ("ch",),
    "CL": ("edu.cl", "cl"),
    "CN": ("cn", "com.cn"),
    "CO": ("edu.co", "co"),
    "CR": ("ed.cr",),
    "CY": ("ac.cy", "cy"),
    "CZ": ("cz",),
    "DE": ("de",),
    "DK": ("dk",),
    "EC": ("edu.ec",),
    "EG": ("edu.eg",),
    "ES": ("es", "edu.es"),
    "ET": ("edu.et",),
    "FI": ("fi",),
    "FR": ("fr",),
    "GB": ("co.uk", "sch.uk", "ac.uk", "org.uk"),
    "GE": ("ge",),
    "GH": ("edu.gh", "com.gh"),
    "GR": ("gr",),
    "GT": ("edu.gt",),
    "HK": ("edu.hk", "hk", "com.hk"),
    "HU": ("hu",),
    "ID": ("sch.id", "com.id"),
    "IL": ("ac.il", "com.il"),
    "IN": ("edu.in", "ac.in", "com.in"),
    "IQ": ("edu.iq",),
    "IR": ("ac.ir",),
    "IT": ("it", "edu.it"),
    "JO": ("edu.jo", "jo"),
    "JP": ("ed.jp", "ac.jp", "jp"),
    "KE": ("ac.ke", "co.ke"),
    "KH": ("edu.kh",),
    "KR": ("ac.kr", "kr"),
    "KW": ("edu.kw",),
    "KZ": ("edu.kz",),
    "LB": ("edu.lb", "lb"),
    "LK": ("ac.lk",),
    "MA": ("ac.ma", "com.ma"),
    "MX": ("edu.mx", "mx", "com.mx"),
    "MY": ("edu.my", "my"),
    "NG": ("edu.ng", "com.ng"),
    "NL": ("nl",),
    "NO": ("no",),
    "NZ": ("school.nz", "ac.nz", "nz"),
    "OM": ("edu.om",),
    "PA": ("edu.pa",),
    "PE": ("edu.pe",),
    "PH": ("edu.ph", "com.ph"),
    "PK": ("edu.pk", "com.pk"),
    "PL": ("edu.pl", "pl"),
    "PT": ("pt",),
    "QA": ("edu.qa", "com.qa"),
    "RO": ("ro",),
    "RW": ("ac.rw",),
    "SA": ("edu.sa", "com.sa"),
    "SE": ("se",),
    "SG": ("edu.sg", "sg", "com.sg"),
    "TH": ("ac.th", "co.th"),
    "TR": ("edu.tr", "k12.tr"),
    "TW": ("edu.tw",),
    "TZ": ("ac.tz", "co.tz"),
    "UA": ("ua", "edu.ua"),
    "US": ("edu", "org", "com"),
    "UZ": ("edu.uz",),
    "VN": ("edu.vn",),
    "ZA": ("ac.za", "com.za", "edu.za"),
    "ZM": ("ac.zm",),
    "ZW": ("ac.zw",),
})

MAX_LOCAL_TLDS = 3
GENERIC_TLDS = ("org", "edu", "com")
CATCH_ALL_TLD = "school"

# Suffixes that only accredited schools can register
SELF_VERIFYING_SUFFIXES = ("ac.", "edu.", "sch.", ".edu", "k12.", ".school")

GENERIC_NAME_WORDS = frozenset({
    "school", "international", "academy", "college", "institute", "university",
    "the", "of", "in", "at", "for", "and", "a", "an",
})

# Words dropped when building the verifier's significant-word set
VERIFY_STOP_WORDS = frozenset({
    "school", "international", "academy", "college", "institute", "university",
    "the", "for", "and",
})

SCHOOL_VOCABULARY = (
    "school", "academy", "college", "students", "teachers",
    "curriculum", "admissions", "faculty", "campus", "education",
)

# First match wins; order matters
CATEGORY_LADDER = (
    ("admin", re.compile(
        r"\b(head\s*(of\s*school)?|principal|director|dean|coordinator|head\s*teacher|"
        r"deputy\s*head|vice\s*principal|assistant\s*head|leader|superintendent|"
        r"registrar|admissions)\b")),
    ("support-staff", re.compile(
        r"\b(librarian|counselor|counsellor|nurse|receptionist|secretary|assistant|aide|"
        r"technician|it\s*support|maintenance|accountant|finance|chef|driver|custodian)\b")),
    ("elementary", re.compile(
        r"\b(elementary|primary|early\s*years|early\s*childhood|eyfs|kindergarten|pre-?k|"
        r"nursery|reception|ks1|key\s*stage\s*1|year\s*[1-6]|grade\s*[k1-5]|infant)\b")),
    ("middle-school", re.compile(
        r"\b(middle\s*school|junior\s*high|ks2|ks3|key\s*stage\s*[23]|year\s*[7-9]|"
        r"grade\s*[6-8]|junior)\b")),
    ("high-school", re.compile(
        r"\b(secondary|high\s*school|ks4|ks5|key\s*stage\s*[45]|sixth\s*form|a[\s-]*level|"
        r"ib|igcse|year\s*1[0-3]|grade\s*(9|10|11|12)|senior)\b")),
)
DEFAULT_CATEGORY = "high-school"
CATEGORIES = tuple(name for name, _ in CATEGORY_LADDER)

JOB_TITLE_KEYWORDS = re.compile(
    r"teacher|professor|instructor|principal|director|coordinator|librarian|counselor|coach|"
    r"administrator|faculty|staff|educator|tutor|assistant|position|vacancy|opportunity",
    re.I,
)
NAVIGATION_TEXT = re.compile(
    r"^(home|about|contact|news|events|alumni|admission|parents|students|calendar)", re.I
)

CAREER_PATHS = (
    "/careers",
    "/jobs",
    "/employment",
    "/vacancies",
    "/job-openings",
    "/work-with-us",
    "/working-with-us",
    "/join-us",
    "/join-our-team",
    "/opportunities",
    "/career-opportunities",
    "/teaching-positions",
    "/staff-vacancies",
    "/recruitment",
    "/hr",
    "/about/careers",
    "/about/employment",
    "/about/jobs",
    "/about/vacancies",
    "/about-us/careers",
    "/about-us/jobs",
    "/pages/careers",
    "/pages/employment",
)

# School groups that recruit for every member school through one ATS account.
# Workday targets are "tenant" or "tenant/site"; other platforms take the slug.
NETWORK_TARGETS = (
    ("GEMS Education", (
        ("workday", "gems/GEMS"), ("workday", "gemseducation"), ("smartrecruiters", "GEMSEducation"),
        ("greenhouse", "gems"), ("lever", "gems-education"),
    )),
    ("Nord Anglia Education", (
        ("workday", "nordanglia"), ("workday", "nord-anglia"), ("smartrecruiters", "NordAngliaEducation"),
        ("greenhouse", "nord-anglia-education"), ("lever", "nord-anglia-education"), ("lever", "nordanglia"),
    )),
    ("Cognita Schools", (
        ("workday", "cognita"), ("smartrecruiters", "Cognita"), ("greenhouse", "cognita"),
        ("lever", "cognita"), ("workable", "cognita"),
    )),
    ("Inspired Education", (
        ("workday", "inspirededucation"), ("smartrecruiters", "InspiredEducationGroup"),
        ("greenhouse", "inspired-education"), ("lever", "inspired-education"), ("workable", "inspired-education"),
    )),
    ("Dulwich College International", (
        ("workday", "dulwich"), ("smartrecruiters", "DulwichCollegeInternational"),
        ("greenhouse", "dulwich-college-international"), ("greenhouse", "dulwich"),
        ("lever", "dulwich-college-international"),
    )),
    ("Harrow International Schools", (
        ("workday", "harrow"), ("smartrecruiters", "HarrowInternational"), ("greenhouse", "harrow"),
        ("lever", "harrow-international"), ("workable", "harrow"),
    )),
    ("ISS (International Schools Services)", (
        ("workday", "iss"), ("workday", "issintl"), ("smartrecruiters", "InternationalSchoolsServices"),
        ("greenhouse", "iss"), ("lever", "iss"),
    )),
    ("Fieldwork Education (IPC)", (
        ("workday", "fieldwork"), ("smartrecruiters", "FieldworkEducation"),
        ("greenhouse", "fieldwork-education"), ("lever", "fieldwork-education"),
    )),
    ("King's College Schools", (
        ("workday", "kingsgroup"), ("smartrecruiters", "KingsGroup"), ("greenhouse", "kings-group"),
        ("lever", "kings-group"), ("workable", "kings-group"),
    )),
    ("The British School Group", (
        ("workday", "britishschoolgroup"), ("smartrecruiters", "BritishSchoolGroup"),
        ("greenhouse", "british-school-group"), ("lever", "british-school-group"),
    )),
    ("Wellington College International", (
        ("workday", "wellingtoncollegeinternational"), ("smartrecruiters", "WellingtonCollegeInternational"),
        ("greenhouse", "wellington-college"), ("lever", "wellington-college"),
    )),
    ("ACS International Schools", (
        ("workday", "acsinternational"), ("smartrecruiters", "ACSInternationalSchools"),
        ("greenhouse", "acs-international"), ("lever", "acs-international"),
    )),
    ("Malvern College International", (
        ("smartrecruiters", "MalvernCollegeInternational"), ("greenhouse", "malvern-college"),
        ("lever", "malvern-college"), ("workable", "malvern-college"),
    )),
    ("SABIS International Schools", (
        ("workday", "sabis"), ("smartrecruiters", "SABIS"), ("greenhouse", "sabis"),
        ("lever", "sabis"), ("workable", "sabis"),
    )),
    ("Taaleem (UAE)", (
        ("workday", "taaleem"), ("smartrecruiters", "Taaleem"), ("greenhouse", "taaleem"),
        ("lever", "taaleem"), ("workable", "taaleem"),
    )),
    ("CAT Global Schools", (
        ("workday", "catglobal"), ("smartrecruiters", "CATGlobal"), ("greenhouse", "cat-schools"),
        ("lever", "cat-schools"),
    )),
    ("Maple Leaf Schools (Canada/China)", (
        ("workday", "mapleleaf"), ("smartrecruiters", "MapleLeafSchools"), ("greenhouse", "maple-leaf"),
        ("lever", "maple-leaf-educational-systems"),
    )),
    ("Carfax Education", (
        ("greenhouse", "carfax"), ("lever", "carfax-education"), ("workable", "carfax-education"),
    )),
    ("Windmill International Schools", (
        ("greenhouse", "windmill"), ("lever", "windmill-education"), ("workable", "windmill"),
    )),
    ("Raha International School / ESOL", (
        ("workday", "esol"), ("workday", "esolgroup"), ("smartrecruiters", "ESOLGroup"),
        ("greenhouse", "esol-education"), ("lever", "esol-education"),
    )),
    ("Innoventures Education (UAE)", (
        ("workday", "innoventures"), ("smartrecruiters", "InnoventuresEducation"),
        ("greenhouse", "innoventures"), ("lever", "innoventures"),
    )),
    ("Aga Khan Academies", (
        ("workday", "agakhaneducation"), ("smartrecruiters", "AgaKhanAcademies"),
        ("greenhouse", "aga-khan-academies"), ("lever", "aga-khan-academies"),
    )),
    ("BSME (British Schools Middle East)", (
        ("workday", "bsme"), ("smartrecruiters", "BSME"), ("greenhouse", "bsme"),
    )),
)
