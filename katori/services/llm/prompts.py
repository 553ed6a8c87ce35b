SYSTEM_PROMPT = "You are an expert in Indian home cooking. You answer only with JSON."

INGREDIENTS_PROMPT = """For the Indian dish "{dish_name}", extract ingredients and their quantities.
IMPORTANT: You must respond ONLY with a JSON array of objects. Each object must have exactly these fields: 'ingredient', 'quantity', and 'unit'.
Rules:
1. Use decimal numbers for quantities (e.g., 0.5 instead of 1/2)
2. Do not include any markdown formatting or code blocks
3. Do not include any explanations or additional text

Example format:
[
  {{"ingredient": "potato", "quantity": 2, "unit": "medium"}},
  {{"ingredient": "cumin seeds", "quantity": 0.5, "unit": "teaspoon"}}
]"""


def build_ingredients_prompt(dish_name: str) -> str:
    return INGREDIENTS_PROMPT.format(dish_name=dish_name)
