"""
Программа: «CRAVINGS» – бэкенд социального сервиса поиска рецептов.
Модуль: routes/ai.py – функции-прокси к LLM-шлюзу.

Назначение модуля:
- POST /process-craving: рецепты (mode=cook) или места поблизости (mode=pickup).
- POST /validate-community: проверка, что название сообщества связано с едой.
- POST /screen-recipe: соответствие рецепта категории сообщества.
Ответ модели возвращается клиенту без изменений.
"""

from flask import current_app, jsonify

from errors import ApiError, InternalError, RateLimited, ValidationError
from utils import prompts
from utils.llm_gateway import complete_json
from utils.rate_limit import is_rate_limited
from utils.request_payload import json_object

PROFICIENCY_LEVELS = {"beginner", "intermediate", "advanced"}


def _api_error(error: ApiError):
    body, status = error.to_response()
    return jsonify(body), status


def _text_field(payload: dict, name: str) -> str:
    value = payload.get(name)
    return value.strip() if isinstance(value, str) else ""


def suggest_for_craving(craving: str, proficiency: str, mode: str) -> dict:
    if mode == "cook":
        system_prompt = prompts.COOK_SYSTEM_PROMPT.format(proficiency=proficiency)
        user_prompt = prompts.COOK_USER_PROMPT.format(craving=craving, proficiency=proficiency)
    else:
        system_prompt = prompts.PICKUP_SYSTEM_PROMPT
        user_prompt = prompts.PICKUP_USER_PROMPT.format(craving=craving)
    return complete_json(system_prompt, user_prompt, json_mode=True)


def validate_community_name(community_name: str, description: str) -> dict:
    prompt = prompts.COMMUNITY_VALIDATOR_PROMPT.format(
        community_name=community_name,
        description=description or "No description provided",
    )
    result = complete_json(prompts.COMMUNITY_VALIDATOR_SYSTEM_PROMPT, prompt)
    current_app.logger.info("Community validation result: %s", result)
    return result


def screen_recipe_for_community(title: str, description: str, ingredients: list, category: str) -> dict:
    prompt = prompts.RECIPE_SCREENER_PROMPT.format(
        title=title,
        description=description or "No description provided",
        ingredients=", ".join(str(item) for item in ingredients) if ingredients else "Not specified",
        category=category,
    )
    result = complete_json(prompts.RECIPE_SCREENER_SYSTEM_PROMPT, prompt)
    current_app.logger.info("Recipe screening result: %s", result)
    return result


def register_routes(app):
    def _guard_rate_limit(bucket: str):
        if is_rate_limited(bucket, limit=30, window_seconds=10 * 60):
            raise RateLimited()

    @app.post("/process-craving")
    def process_craving():
        try:
            _guard_rate_limit("process_craving")
            payload = json_object()
            craving = _text_field(payload, "craving")
            if not craving:
                raise ValidationError("Craving is required")

            mode = "cook" if _text_field(payload, "mode").lower() == "cook" else "pickup"
            proficiency = _text_field(payload, "proficiency").lower()
            if proficiency not in PROFICIENCY_LEVELS:
                proficiency = "beginner"

            return jsonify(suggest_for_craving(craving, proficiency, mode)), 200
        except ApiError as exc:
            return _api_error(exc)
        except Exception:
            current_app.logger.exception("Error in process-craving function")
            return _api_error(InternalError())

    @app.post("/validate-community")
    def validate_community():
        try:
            _guard_rate_limit("validate_community")
            payload = json_object()
            community_name = _text_field(payload, "communityName")
            if not community_name:
                raise ValidationError("Community name is required")

            result = validate_community_name(community_name, _text_field(payload, "description"))
            return jsonify(result), 200
        except ApiError as exc:
            return _api_error(exc)
        except Exception:
            current_app.logger.exception("Validate community error")
            return _api_error(InternalError())

    @app.post("/screen-recipe")
    def screen_recipe():
        try:
            _guard_rate_limit("screen_recipe")
            payload = json_object()
            title = _text_field(payload, "recipeTitle")
            category = _text_field(payload, "communityCategory")
            if not title or not category:
                raise ValidationError("Recipe title and community category are required")

            ingredients = payload.get("ingredients")
            if not isinstance(ingredients, list):
                ingredients = []

            result = screen_recipe_for_community(
                title,
                _text_field(payload, "recipeDescription"),
                ingredients,
                category,
            )
            return jsonify(result), 200
        except ApiError as exc:
            return _api_error(exc)
        except Exception:
            current_app.logger.exception("Screen recipe error")
            return _api_error(InternalError())
