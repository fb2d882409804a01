"""Telegram bot that turns a photo of food into a recipe. Centres around the
`RecipePipeline` and the `Dispatcher` feeding it.

Why is this hard?

- Recognition and generation are both large language models behind apis.
  They are slow, they fail, and they do not always answer in the format asked.
- Updates arrive concurrently and each must be handled on its own.
- Browsing saved recipes needs state, but the only place to keep it is the
  button the user presses.

The models and the transport can be faked, so everything else is testable.
"""
