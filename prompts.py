"""Prompts sent to the paper analysis service."""

SYSTEM_PROMPT = """You are a research librarian cataloguing scientific papers.
Respond ONLY with a single valid JSON object following the schema below.
No markdown code fences, no introduction, no closing remarks.

Required JSON schema:
{
  "title": "Title of the paper",
  "summary": "Paraphrased summary of the abstract",
  "authors": ["Author 1", "Author 2"],
  "journal": "Journal or venue name",
  "publishDate": "Publish date as printed, e.g. September 2023 or 2024-01-15",
  "topic": "Single main field, e.g. Neuroscience",
  "subTopic": "Specific sub-field, e.g. Cognitive Neuroscience",
  "tags": ["Keyword 1", "Keyword 2", "Corresponding author", "Model organism"],
  "foundUrl": "https://... (only when asked to find the paper's URL)"
}"""

_FIELD_RULES = """Rules:
- summary: rewrite the abstract in your own words, covering background, methods,
  results and conclusion. Never copy the abstract verbatim.
- authors: list every author; do not shorten to "et al".
- topic: exactly one main field. subTopic refines it.
- tags: 3-5 specific keywords, including the corresponding author's name,
  key molecules or model organisms where relevant.
- Escape double quotes inside strings so the output stays valid JSON."""

URL_PROMPT_TEMPLATE = """I have a research paper URL: "{url}".

Find the official page for this URL, make sure it is the paper the link points
to, and extract its metadata.

""" + _FIELD_RULES

PDF_PROMPT = """I have attached a research paper PDF.

Identify the paper, extract its metadata, and find its official online source
(DOI link or permanent publisher URL such as arxiv.org or nature.com). Put that
URL in the "foundUrl" field.

""" + _FIELD_RULES


def url_prompt(url: str) -> str:
    return URL_PROMPT_TEMPLATE.format(url=url)
