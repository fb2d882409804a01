HELP_BUTTON = "Help"
RECIPES_BUTTON = "My recipes"

BOT_COMMANDS = (
    ("start", "Start using the bot"),
    ("help", "Get help"),
    ("recipes", "Browse saved recipes"),
)

WELCOME = (
    "Hello, {name}!\n\n"
    "I recognize food in photos and suggest recipes.\n\n"
    "Send me a photo of your products and I will come up with a recipe.\n\n"
    "Commands:\n"
    "/help - help\n"
    "/recipes - saved recipes"
)

HELP = """*How to use the bot:*

1. Send a photo of your products
2. The bot recognizes the products
3. The bot suggests a recipe
4. The recipe is saved for later

*Commands:*
/start - start
/help - help
/recipes - saved recipes"""

UNKNOWN_COMMAND = "Unknown command. Use /help for the list of commands."
TEXT_HINT = "Send a photo of your products or use the commands (/help)."

PROCESSING = "Processing your photo... This will take a few seconds."
RECOGNIZED = "Recognized products:\n{items}\n\nGenerating a recipe..."

GENERIC_ERROR = "Something went wrong. Please try again."
PHOTO_DOWNLOAD_FAILED = "Could not download the photo. Please try again."
NOTHING_RECOGNIZED = "Could not recognize any products. Try a clearer photo."
RECOGNITION_FAILED = "Product recognition failed. Please try again."
GENERATION_FAILED = "Could not generate a recipe. Please try again."
UNREADABLE_RESULT = "Could not understand the result. Please try again."

NO_RECIPES = (
    "You have no saved recipes yet. "
    "Send a photo of your products to get one."
)
RECIPE_LIST = "Your saved recipes:"
RECIPE_NOT_FOUND = "Could not find that recipe."
RECIPE_DELETED = "Recipe deleted. Use /recipes to see the rest."
BROWSE_FAILED = "Could not load your recipes. Please try again."
DELETE_BUTTON = "🗑 Delete"
BACK_BUTTON = "« Back"
UNKNOWN_ACTION = "This button is no longer valid."
