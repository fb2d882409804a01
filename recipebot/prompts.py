# Kept short on purpose: long product lists make the vision model loop.
RECOGNIZE_ITEMS_PROMPT = """
List all food products in this image.
Return only JSON: {"items": ["product1", "product2"]}.
Maximum 20 products.
""".strip()


RECIPE_SYSTEM_PROMPT = (
    "You are a culinary expert. "
    "Your task is to create recipes from the products the user has available."
)


CREATE_RECIPE_PROMPT = """
Create a recipe based on the following products.
Products: {products}.

You do not have to use every product from the list, and you may add basic
ingredients that are not on it.
Return the recipe as JSON with the following fields:
{{
  "title": "Recipe title",
  "ingredients": ["ingredient 1", "ingredient 2", ...],
  "instructions": "Step by step cooking instructions"
}}

Do not add any other fields or text, only the JSON.
""".strip()


class CreateRecipePrompt:
    def __init__(
        self,
        products: list[str],
        content: str | None = None,
    ) -> None:
        self.products = products
        self.content = CREATE_RECIPE_PROMPT if content is None else content

    def __str__(self) -> str:
        return self.content.format(products=", ".join(self.products))
