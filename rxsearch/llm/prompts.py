SYSTEM_PROMPT = (
    "You are a clinical pharmacist assistant. You only name candidate medications; "
    "the prescriber makes every decision. Answer with JSON only."
)


def build_diagnosis_prompt(diagnosis, symptoms=None, max_names=10):
    """Prompt asking for a JSON list of generic medication names for a diagnosis."""
    symptom_text = ", ".join(symptoms) if symptoms else "Not provided"
    return f"""Diagnosis: {diagnosis}
Symptoms: {symptom_text}

List up to {max_names} medications commonly prescribed for this diagnosis.
Use plain generic or brand names, no doses.

Respond with exactly this JSON shape and nothing else:
{{"medications": ["Name 1", "Name 2"]}}"""
