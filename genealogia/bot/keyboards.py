from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.utils.keyboard import InlineKeyboardBuilder


def main_menu_keyboard() -> InlineKeyboardMarkup:
    """Menú principal del bot"""
    builder = InlineKeyboardBuilder()

    builder.row(
        InlineKeyboardButton(text="🌳 Árbol genealógico", callback_data="doc:arbol")
    )
    builder.row(
        InlineKeyboardButton(text="📄 Certificado", callback_data="doc:certificado"),
        InlineKeyboardButton(text="📊 Reporte", callback_data="doc:reporte")
    )
    builder.row(
        InlineKeyboardButton(text="ℹ️ Ayuda", callback_data="menu:help")
    )

    return builder.as_markup()


def cancel_keyboard() -> InlineKeyboardMarkup:
    """Botón de cancelar"""
    builder = InlineKeyboardBuilder()
    builder.row(InlineKeyboardButton(text="❌ Cancelar", callback_data="cancel"))
    return builder.as_markup()


def back_to_main_keyboard() -> InlineKeyboardMarkup:
    """Botón de volver al menú"""
    builder = InlineKeyboardBuilder()
    builder.row(InlineKeyboardButton(text="🏠 Menú principal", callback_data="menu:main"))
    return builder.as_markup()


def result_keyboard(dni: str, kind: str) -> InlineKeyboardMarkup:
    """Otros documentos para el mismo DNI"""
    builder = InlineKeyboardBuilder()
    others = {
        "arbol": "🌳 Árbol",
        "certificado": "📄 Certificado",
        "reporte": "📊 Reporte",
    }
    builder.row(*[
        InlineKeyboardButton(text=text, callback_data=f"again:{other}:{dni}")
        for other, text in others.items() if other != kind
    ])
    builder.row(InlineKeyboardButton(text="🏠 Menú principal", callback_data="menu:main"))
    return builder.as_markup()
