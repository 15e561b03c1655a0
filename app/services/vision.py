"""
Vision model client for flyer analysis.

Sends the flyer to an OpenAI-compatible chat completions endpoint and returns
the parsed JSON analysis. The model is only trusted to *recognize* the date
pattern (weekday names, day numbers, month bounds); calendar arithmetic is
done afterwards by ``app.recurrence``.
"""
import json
from datetime import date, datetime, UTC
from typing import Any, Dict, NamedTuple, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import ServiceNotConfigured, ValidationError, VisionServiceError
from app.core.logging import vision_logger as logger
from app.schemas.analysis import AnalysisMetadata, NOT_SPECIFIED
from app.utils.dates import local_today

SPANISH_MONTHS = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]

SYSTEM_PROMPT = """Eres un especialista en análisis de imágenes de eventos.

CONTEXTO TEMPORAL: Hoy es {day} de {month_name} de {year}. Si la imagen solo muestra un día de la semana o número de día sin mes/año explícito, usa el mes y año actual. Si el número de día ya pasó este mes, usa el siguiente mes. IMPORTANTE: No restes ni ajustes el día - si la imagen dice "11", la fecha debe ser día 11, no día 10.

TAREA: Analiza esta imagen de evento y extrae TODA la información visible.

EXTRAE:
- Nombre del evento (event_name)
- Fecha del evento (date) en formato YYYY-MM-DD
- Hora de inicio (time) en formato HH:MM (24 horas)
- Hora de fin (end_time) en formato HH:MM (24 horas) - si se menciona
- Descripción/detalles del evento (description)
- Ubicación/lugar (location)
- Organizador (organizer) - busca @usuario de Instagram, nombre de organizador, promotor, o quien presenta el evento
- Precio (price) - "Gratis", "Q50", "50 GTQ", etc.
- URL de registro (registration_url) - si hay un link visible

FECHAS MÚLTIPLES Y EVENTOS RECURRENTES:
No calcules listas de fechas. Describe solo el patrón:
1. is_recurring: true si el flyer dice que el evento se repite sin números de día ("todos los viernes", "cada sábado de febrero", "los lunes de marzo a mayo"). Un día de la semana acompañado de un número ("viernes 13") NO es recurrente.
2. recurring_pattern: descripción del patrón (ej: "Todos los lunes de febrero {year}")
3. weekday_names: días de la semana en español, en minúsculas (ej: ["viernes", "sábado"])
4. specific_days: números de día mencionados (ej: "13 y 14 de febrero" → [13, 14])
5. month_start y month_end: primer y último mes del patrón en formato YYYY-MM

INSTRUCCIONES:
- Si encuentras múltiples fechas individuales, usa la primera como date principal
- Si no encuentras algún dato, indica "No especificado"
- Transcribe texto exactamente como aparece
- Detecta información en español e inglés
- Para fechas en formato texto (ej: "15 de agosto"), conviértelas a YYYY-MM-DD
- Para horas, usa formato 24 horas (ej: "8:00 PM" → "20:00")
- Si dice "de 7pm a 10pm", extrae time="19:00" y end_time="22:00"
- Para organizador, busca: @handles de Instagram, "presenta:", "organiza:", "by:", logos de promotoras, nombres de DJs/artistas principales

FORMATO DE SALIDA (JSON estricto):
{{
  "event_name": "...",
  "date": "YYYY-MM-DD o No especificado",
  "time": "HH:MM o No especificado",
  "end_time": "HH:MM o No especificado",
  "description": "...",
  "location": "...",
  "organizer": "@instagram o nombre del organizador o No especificado",
  "price": "Gratis, Q50, etc. o No especificado",
  "registration_url": "https://... o No especificado",
  "is_recurring": true/false,
  "recurring_pattern": "descripción del patrón o null",
  "weekday_names": ["viernes", ...] o [],
  "specific_days": [13, 14, ...] o [],
  "month_start": "YYYY-MM o null",
  "month_end": "YYYY-MM o null",
  "confidence": "high|medium|low",
  "extracted_text": "Todo el texto visible en la imagen"
}}"""


class VisionResult(NamedTuple):
    analysis: Dict[str, Any]
    metadata: AnalysisMetadata


def validate_image_data(image_data: Any) -> None:
    """Raise ``ValidationError`` unless the image is an http(s) URL or a data:image/ payload."""
    if not image_data or not isinstance(image_data, str):
        raise ValidationError("Image data is required")
    is_url = image_data.startswith(("http://", "https://"))
    is_base64 = image_data.startswith("data:image/")
    if not is_url and not is_base64:
        raise ValidationError("Image must be a URL or base64 encoded data")


def build_system_prompt(today: date) -> str:
    return SYSTEM_PROMPT.format(
        day=today.day,
        month_name=SPANISH_MONTHS[today.month - 1],
        year=today.year,
    )


def fallback_analysis(raw_content: str) -> Dict[str, Any]:
    """Analysis returned when the model output is not a JSON object."""
    return {
        "event_name": "Error en análisis",
        "date": NOT_SPECIFIED,
        "time": NOT_SPECIFIED,
        "end_time": NOT_SPECIFIED,
        "description": raw_content[:500],
        "location": NOT_SPECIFIED,
        "organizer": NOT_SPECIFIED,
        "price": NOT_SPECIFIED,
        "registration_url": NOT_SPECIFIED,
        "is_recurring": False,
        "recurring_pattern": None,
        "recurring_dates": [],
        "confidence": "low",
        "extracted_text": raw_content,
    }


def parse_analysis_content(raw_content: str) -> Dict[str, Any]:
    try:
        analysis = json.loads(raw_content)
    except json.JSONDecodeError as e:
        logger.error("Vision response is not valid JSON", extra={"error": str(e), "raw_length": len(raw_content)})
        return fallback_analysis(raw_content)
    if not isinstance(analysis, dict):
        logger.error("Vision response is not a JSON object", extra={"raw_length": len(raw_content)})
        return fallback_analysis(raw_content)
    return analysis


def extract_message_content(body: Dict[str, Any]) -> Any:
    """Content of the first choice's message, None when the body has no such message."""
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return None
    return message.get("content")


def extract_tokens_used(body: Dict[str, Any]) -> int:
    usage = body.get("usage")
    tokens = usage.get("total_tokens") if isinstance(usage, dict) else None
    if isinstance(tokens, bool) or not isinstance(tokens, int):
        return 0
    return tokens


class VisionClient:
    """Client for an OpenAI-compatible vision chat completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.VISION_MODEL
        self.base_url = base_url or settings.VISION_API_BASE
        self.timeout = timeout or settings.VISION_TIMEOUT_SECONDS
        self._transport = transport

    def build_payload(self, image_data: str, title: str, today: date) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": build_system_prompt(today)},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": f'Analiza esta imagen de evento: "{title}"'},
                        {"type": "image_url", "image_url": {"url": image_data, "detail": "high"}},
                    ],
                },
            ],
            "max_tokens": settings.VISION_MAX_TOKENS,
            "temperature": 0.1,
            "response_format": {"type": "json_object"},
        }

    async def analyze_event_image(
        self,
        image_data: str,
        title: str = "Evento",
        today: Optional[date] = None,
    ) -> VisionResult:
        """
        Analyze a flyer and return the raw (unsanitized) analysis plus call metadata.

        Raises:
            ServiceNotConfigured: no API key is configured
            VisionServiceError: the call failed or returned no content
        """
        if not self.api_key:
            raise ServiceNotConfigured("OPENAI_API_KEY not configured")

        today = today or local_today()
        logger.info("Analyzing event image", extra={"title": title, "model": self.model})

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    "/chat/completions",
                    json=self.build_payload(image_data, title, today),
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Vision API returned an error status",
                extra={"status_code": e.response.status_code},
            )
            raise VisionServiceError(f"Vision API error: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("Vision API request failed", extra={"error": str(e), "error_type": e.__class__.__name__})
            raise VisionServiceError("Vision API request failed") from e
        except ValueError as e:
            logger.error("Vision API returned a non-JSON body", extra={"error": str(e)})
            raise VisionServiceError("Vision API returned an invalid body") from e

        if not isinstance(body, dict):
            raise VisionServiceError("Vision API returned an invalid body")

        raw_content = extract_message_content(body)
        if not raw_content:
            raise VisionServiceError("Empty response from vision model")
        if not isinstance(raw_content, str):
            logger.error("Vision message content is not text", extra={"content_type": type(raw_content).__name__})
            raise VisionServiceError("Vision API returned an invalid body")

        logger.info("Vision response received", extra={"raw_length": len(raw_content)})

        tokens_used = extract_tokens_used(body)
        analysis = parse_analysis_content(raw_content)

        logger.info(
            "Analysis completed",
            extra={"confidence": analysis.get("confidence"), "tokens_used": tokens_used},
        )
        return VisionResult(
            analysis=analysis,
            metadata=AnalysisMetadata(
                model=self.model,
                tokens_used=tokens_used,
                analyzed_at=datetime.now(UTC),
            ),
        )


def get_vision_client() -> VisionClient:
    """Dependency returning a client configured from settings."""
    return VisionClient()
