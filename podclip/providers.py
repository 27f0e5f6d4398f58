import os
from typing import Callable

from podclip.errors import InputError, ScoringFailure
from podclip.prompts import SYSTEM_PROMPT, USER_PROMPT_TEMPLATE

ScoreTextFn = Callable[[str], str]


def score_text_openai(text: str, model: str) -> str:
    try:
        from openai import OpenAI
    except ImportError:
        raise ScoringFailure("OpenAI provider unavailable. Install dependency: pip install openai")

    client = OpenAI()
    try:
        response = client.chat.completions.create(
            model=model,
            temperature=0.3,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": USER_PROMPT_TEMPLATE.format(text=text)},
            ],
        )
        content = response.choices[0].message.content
    except Exception as exc:
        raise ScoringFailure(f"OpenAI request failed: {exc}") from exc

    if not content:
        raise ScoringFailure("OpenAI returned an empty response.")
    return content.strip()


def score_text_gemini(text: str, model: str) -> str:
    try:
        from google import genai
    except ImportError:
        raise ScoringFailure("Gemini provider unavailable. Install dependency: pip install google-genai")

    api_key = os.environ.get("GEMINI_API_KEY")
    if not api_key:
        raise ScoringFailure("Gemini provider requires GEMINI_API_KEY to be set.")

    client = genai.Client(api_key=api_key)
    try:
        response = client.models.generate_content(
            model=model,
            contents=f"{SYSTEM_PROMPT}\n\n{USER_PROMPT_TEMPLATE.format(text=text)}",
        )
        content = response.text
    except Exception as exc:
        raise ScoringFailure(f"Gemini request failed: {exc}") from exc

    if not content:
        raise ScoringFailure("Gemini returned an empty response.")
    return content.strip()


def score_text_ollama(text: str, model: str) -> str:
    try:
        import ollama
    except ImportError:
        raise ScoringFailure("Ollama provider unavailable. Install dependency: pip install ollama")

    try:
        response = ollama.chat(
            model=model,
            format="json",
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": USER_PROMPT_TEMPLATE.format(text=text)},
            ],
        )
        content = response["message"]["content"]
    except Exception as exc:
        raise ScoringFailure(f"Ollama request failed: {exc}") from exc

    if not content:
        raise ScoringFailure("Ollama returned an empty response.")
    return content.strip()


PROVIDERS = ("openai", "gemini", "ollama")


def score_text(provider: str, text: str, model: str) -> str:
    provider_handlers = {
        "openai": score_text_openai,
        "gemini": score_text_gemini,
        "ollama": score_text_ollama,
    }
    handler = provider_handlers.get(provider)
    if handler is None:
        valid_providers = ", ".join(provider_handlers.keys())
        raise InputError(f"Unknown provider '{provider}'. Expected one of: {valid_providers}")
    return handler(text, model)


def make_score_text(provider: str, model: str) -> ScoreTextFn:
    """Bind a provider and model into the `text -> raw response` callable the scorer expects."""
    if provider not in PROVIDERS:
        valid_providers = ", ".join(PROVIDERS)
        raise InputError(f"Unknown provider '{provider}'. Expected one of: {valid_providers}")
    return lambda text: score_text(provider, text, model)
