from aiogram import Router, F
from aiogram.types import Message, CallbackQuery, BufferedInputFile
from aiogram.filters import Command, CommandStart, CommandObject
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from genealogia.utils import validate_dni, format_dni
from genealogia.clients import UpstreamUnavailable
from genealogia.bot.keyboards import (
    main_menu_keyboard, cancel_keyboard, back_to_main_keyboard, result_keyboard
)
from genealogia.services.reports import ReportKind, render_document
import logging

logger = logging.getLogger(__name__)

router = Router()


# === FSM States ===

class DocumentStates(StatesGroup):
    waiting_for_dni = State()


_KIND_TITLES = {
    ReportKind.TREE: "🌳 <b>Árbol genealógico</b>",
    ReportKind.CERTIFICATE: "📄 <b>Certificado de vínculo familiar</b>",
    ReportKind.REPORT: "📊 <b>Reporte genealógico</b>",
}


def normalize_dni_input(text: str) -> str:
    """
    Limpia el DNI introducido por el usuario.
    "12.345.678" → "12345678", "1234567" → "01234567"
    """
    cleaned = (text or "").strip().replace(".", "").replace(" ", "").replace("-", "")
    if cleaned.isdigit() and 0 < len(cleaned) < 8:
        return format_dni(cleaned)
    return cleaned


async def _send_document(message: Message, dni: str, kind: str, user_id: int = None) -> None:
    """Consulta el registro, genera el documento y lo envía al chat"""
    dni = normalize_dni_input(dni)
    if not validate_dni(dni):
        await message.answer(
            "❌ DNI inválido. Debe tener 8 dígitos.",
            reply_markup=cancel_keyboard()
        )
        return

    status = await message.answer(f"🔄 Consultando el registro para DNI <b>{dni}</b>...", parse_mode="HTML")

    try:
        doc = await render_document(dni, kind)
    except UpstreamUnavailable as e:
        logger.warning(f"Registry unavailable for {dni}: {e}")
        await status.edit_text(
            "⚠️ No se pudieron obtener datos del registro para este DNI.\n"
            "Verifique el número o inténtelo más tarde.",
            reply_markup=back_to_main_keyboard()
        )
        return
    except Exception as e:
        logger.error(f"Render error {kind}/{dni}: {e}")
        await status.edit_text(
            "❌ Error al generar el documento.",
            reply_markup=back_to_main_keyboard()
        )
        return

    file = BufferedInputFile(doc.content, filename=doc.filename)
    await message.answer_document(file, caption=doc.caption, reply_markup=result_keyboard(dni, kind))
    await status.delete()

    logger.info(f"User {user_id} generated {kind} for {dni}")


# === Start & Main Menu ===

@router.message(CommandStart())
async def cmd_start(message: Message):
    """Menú principal"""
    text = """
🌳 <b>Consulta genealógica</b>

Genero documentos a partir del registro civil:

🌳 <b>Árbol genealógico</b> en imagen
📄 <b>Certificado</b> de vínculo familiar
📊 <b>Reporte</b> por ramas con estadísticas

Elija un documento:
"""
    await message.answer(text, reply_markup=main_menu_keyboard(), parse_mode="HTML")


@router.message(Command("menu"))
async def cmd_menu(message: Message):
    """Mostrar el menú principal"""
    await message.answer(
        "🏠 <b>Menú principal</b>\n\nElija un documento:",
        reply_markup=main_menu_keyboard(),
        parse_mode="HTML"
    )


@router.callback_query(F.data == "menu:main")
async def callback_main_menu(callback: CallbackQuery, state: FSMContext):
    """Volver al menú principal"""
    await state.clear()
    await callback.message.answer(
        "🏠 <b>Menú principal</b>\n\nElija un documento:",
        reply_markup=main_menu_keyboard(),
        parse_mode="HTML"
    )
    await callback.answer()


@router.callback_query(F.data == "cancel")
async def callback_cancel(callback: CallbackQuery, state: FSMContext):
    """Cancelar la acción"""
    await state.clear()
    await callback.message.edit_text(
        "❌ Acción cancelada.",
        reply_markup=back_to_main_keyboard()
    )
    await callback.answer()


@router.message(Command("help"))
@router.callback_query(F.data == "menu:help")
async def cmd_help(event):
    """Ayuda"""
    text = """
ℹ️ <b>Ayuda</b>

<b>Comandos:</b>
/arbol &lt;DNI&gt; - árbol genealógico (PNG)
/certificado &lt;DNI&gt; - certificado de vínculo familiar (PDF)
/reporte &lt;DNI&gt; - reporte genealógico por ramas (PDF)
/menu - menú principal

El DNI tiene 8 dígitos.
"""
    if isinstance(event, CallbackQuery):
        await event.message.edit_text(text, reply_markup=back_to_main_keyboard(), parse_mode="HTML")
        await event.answer()
    else:
        await event.answer(text, reply_markup=back_to_main_keyboard(), parse_mode="HTML")


# === Documents ===

@router.callback_query(F.data.startswith("doc:"))
async def callback_choose_document(callback: CallbackQuery, state: FSMContext):
    """Pedir el DNI para el documento elegido"""
    kind = callback.data.split(":", 1)[1]
    if kind not in ReportKind.ALL:
        await callback.answer("Documento desconocido", show_alert=True)
        return

    await state.set_state(DocumentStates.waiting_for_dni)
    await state.update_data(kind=kind)
    await callback.message.edit_text(
        f"{_KIND_TITLES[kind]}\n\nIntroduzca el DNI (8 dígitos):",
        reply_markup=cancel_keyboard(),
        parse_mode="HTML"
    )
    await callback.answer()


@router.message(DocumentStates.waiting_for_dni, ~F.text.startswith("/"))
async def process_dni(message: Message, state: FSMContext):
    """Generar el documento pendiente para el DNI recibido"""
    data = await state.get_data()
    kind = data.get("kind", ReportKind.TREE)
    dni = normalize_dni_input(message.text or "")

    if not validate_dni(dni):
        await message.answer(
            "❌ DNI inválido. Debe tener 8 dígitos. Inténtelo de nuevo:",
            reply_markup=cancel_keyboard()
        )
        return

    await state.clear()
    await _send_document(message, dni, kind, user_id=message.from_user.id if message.from_user else None)


@router.callback_query(F.data.startswith("again:"))
async def callback_another_document(callback: CallbackQuery):
    """Otro documento para el mismo DNI"""
    parts = callback.data.split(":")
    if len(parts) != 3 or parts[1] not in ReportKind.ALL:
        await callback.answer("Solicitud inválida", show_alert=True)
        return

    await callback.answer("🔄 Generando...")
    await _send_document(callback.message, parts[2], parts[1], user_id=callback.from_user.id)


async def _command_document(message: Message, command: CommandObject, kind: str):
    if not command.args:
        await message.answer(
            f"Uso: /{kind} &lt;DNI&gt;",
            parse_mode="HTML"
        )
        return
    await _send_document(message, command.args, kind, user_id=message.from_user.id if message.from_user else None)


@router.message(Command("arbol"))
async def cmd_tree(message: Message, command: CommandObject):
    """Árbol genealógico por comando"""
    await _command_document(message, command, ReportKind.TREE)


@router.message(Command("certificado"))
async def cmd_certificate(message: Message, command: CommandObject):
    """Certificado por comando"""
    await _command_document(message, command, ReportKind.CERTIFICATE)


@router.message(Command("reporte"))
async def cmd_report(message: Message, command: CommandObject):
    """Reporte por comando"""
    await _command_document(message, command, ReportKind.REPORT)
