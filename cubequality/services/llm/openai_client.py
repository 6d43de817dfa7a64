import logging

from openai import OpenAI

from cubequality.core.config import get_settings
from cubequality.services.strength import DEFAULT_CUBE_SIZE

logger = logging.getLogger(__name__)

BATCH_SECTIONS = (("7-Day", "sevenDays"), ("28-Day", "twentyEightDays"))


def generate_quality_report(form: dict) -> str:
    """Ask the model for a structured quality assessment; returns the raw JSON text."""
    settings = get_settings()
    if not settings.openai_api_key:
        raise ValueError("OPENAI_API_KEY is not configured.")

    client = OpenAI(api_key=settings.openai_api_key)
    cube_size = form.get("cubeSize") or DEFAULT_CUBE_SIZE
    system_prompt = (
        "You are an expert Civil Engineer specializing in concrete quality control. "
        "Analyze the provided concrete cube testing data. "
        f"Assume a cube size of {cube_size}mm x {cube_size}mm and calculate the compressive strength of each cube as "
        f"Strength (N/mm²) = (Load (kN) * 1000) / ({cube_size} * {cube_size}). "
        "Calculate the average strength for the 7-day and 28-day tests. "
        "If load data for a period is missing or zero, return zero for strengths and average and 'N/A' for status. "
        "Judge pass or fail against the grade's characteristic strength (the number in the grade, e.g. 25 N/mm² for M25): "
        "the 7-day average must reach at least 67% of it and the 28-day average must meet or exceed it. "
        "Consider the mix details in your recommendations. Keep the tone objective and formal."
    )
    schema_prompt = (
        "Return JSON only. Match this exact schema with correct types: "
        "{summary:str(1-2 sentences), qualityScore:int(1..100), "
        "sevenDaysResults:{strengths:[number,number,number],averageStrength:number,status:Pass|Fail|N/A}, "
        "twentyEightDaysResults:{strengths:[number,number,number],averageStrength:number,status:Pass|Fail|N/A}, "
        "issues:[str], recommendations:[str]}. "
        "Use empty arrays when there are no issues or recommendations."
    )

    completion = client.chat.completions.create(
        model=settings.openai_model,
        response_format={"type": "json_object"},
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "system", "content": schema_prompt},
            {"role": "user", "content": build_prompt(form)},
        ],
    )
    content = (completion.choices[0].message.content or "").strip()
    if not content:
        raise ValueError("Received an empty response from the AI. Please check the input and try again.")
    logger.info("quality_report_generated", extra={"unique_ref_no": form.get("uniqueRefNo"), "model": settings.openai_model})
    return content


def build_prompt(form: dict) -> str:
    lines = [
        "Analyze the following concrete cube test data and generate a structured JSON response.",
        "",
        "## Project Information",
        f"- Client Name: {form.get('clientName', '')}",
        f"- Site/Plant: {form.get('siteOrPlant', '')}",
        f"- Unique Reference No: {form.get('uniqueRefNo', '')}",
        f"- Date of Casting: {form.get('dateOfCasting', '')}",
        "",
        "## Casting Details",
        f"- Concrete Grade: {form.get('grade', '')}",
        f"- Mix Code: {form.get('mixCode', '')}",
        f"- FT Name: {form.get('ftName', '')}",
        f"- Mix Type: {form.get('mixType', '')}",
        f"- Cube Size: {form.get('cubeSize') or DEFAULT_CUBE_SIZE} mm",
        f"- Mix Details: OPC={form.get('opc') or 0} kg, Flyash={form.get('flyash') or 0} kg, PPC={form.get('ppc') or 0} kg",
    ]
    for label, prefix in BATCH_SECTIONS:
        lines += ["", f"## {label} Test Results", f"- Test Date: {form.get(f'{prefix}TestDate') or 'Not Provided'}"]
        for cube in (1, 2, 3):
            weight = form.get(f"{prefix}Weight{cube}") or 0
            load = form.get(f"{prefix}Load{cube}") or 0
            lines.append(f"- Cube {cube}: Weight={weight} kg, Load={load} kN")
    lines += ["", "## Additional Observations", form.get("observations") or "None"]
    return "\n".join(lines)
