"""
Message bodies sent through the bot.
Plain strings only; no Telegram API call is made here.
"""


def welcome_body(first_name: str | None) -> str:
    return (
        f"Hello, {first_name or 'there'}! I am the bot that sends verification codes.\n"
        f"A code will be sent to you during registration."
    )


NO_USERNAME_TEXT = (
    "Hello! Please set a username in your Telegram profile, "
    "otherwise the system cannot identify you."
)

HELP_TEXT = (
    "I am the bot that sends verification codes. "
    "A code will be sent to you during registration."
)


def verification_code_body(code: str, ttl_minutes: int) -> str:
    return (
        f"Your verification code: {code}\n\n"
        f"This code is valid for {ttl_minutes} minutes."
    )


def registration_congrats_body(full_name: str, login: str) -> str:
    return (
        f"Congratulations, {full_name}! You have registered successfully.\n\n"
        f"Login: {login}"
    )
