import re


def slugify(text: str) -> str:
    text = re.sub(r"[^$\w\s-]", "-", str(text).lower().strip())
    text = re.sub(r"[\s_-]+", "-", text)
    return text.strip("-")


def to_machine_name(name: str) -> str:
    name = re.sub(r"[^a-z0-9\s-]", "", name.lower())
    return re.sub(r"\s-\s|\s+", "-", name)


def to_sd_machine_name(name: str) -> str:
    """Style-Dictionary path segment for a style name."""
    name = re.sub(r"[^a-z0-9\s-]", "-", name.lower())
    name = re.sub(r"\s-\s|\s+", "-", name)
    name = re.sub(r"-+", "-", name)
    return re.sub(r"(^,)|(,$)", "", name)


def start_case(text: str) -> str:
    """``"hello-world_example"`` -> ``"Hello World Example"``."""
    text = re.sub(r"[_-]+", " ", text)
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", text)
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split())


def capitalize(text: str) -> str:
    return text[:1].upper() + text[1:].lower() if text else ""
