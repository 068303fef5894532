import discord
from discord.ext import commands
import logging
import asyncio
from typing import Dict, Optional
import os

from .config_manager import ConfigManager
from .countdown import CountdownDriver
from .models import GameEvent, GameState, team_label
from .question_bank import QuestionBank
from .question_source import QuestionSource
from .turn_engine import TurnEngine

logger = logging.getLogger(__name__)

# Chat cues standing in for the board's sound effects
CUE_MESSAGES: Dict[GameEvent, str] = {
    GameEvent.TURN_STARTED: "🔔 {team}, your time starts now!",
    GameEvent.LOW_TIME_WARNING: "⏳ {seconds}...",
    GameEvent.TIME_EXPIRED: "⏰ Time's up for {team}!",
    GameEvent.CORRECT: "🎉 Correct! Point to {team}.",
    GameEvent.INCORRECT: "❌ Not quite, {team}.",
    GameEvent.GAME_RESET: "🔄 New game! {team} is up.",
}


def timer_status(state: GameState, low_time_threshold: int) -> str:
    """Classify the clock for display: 'idle', 'normal', 'low' or 'expired'."""
    if state.active_question is None:
        return "idle"
    if state.is_expired:
        return "expired"
    if state.time_remaining <= low_time_threshold:
        return "low"
    return "normal"


DEFAULT_BOARD_TITLE = "🇿🇦 South African Heritage Day Quiz"

TIMER_COLORS = {
    "idle": 0x3498db,
    "normal": 0x00ff00,
    "low": 0xff6600,
    "expired": 0xff0000,
}


def build_board_embed(
    state: GameState,
    low_time_threshold: int = 5,
    title: str = DEFAULT_BOARD_TITLE
) -> discord.Embed:
    """Render the scoreboard, current team, question and clock as an embed."""
    status = timer_status(state, low_time_threshold)
    current = team_label(state.current_team)

    if state.active_question is None:
        description = f"Use `/start_turn` to begin {current}'s turn!"
    else:
        description = state.active_question.text

    embed = discord.Embed(
        title=title,
        description=description,
        color=TIMER_COLORS[status]
    )

    scoreboard = "\n".join(
        f"{'▶ ' if team == state.current_team else ''}{team_label(team)}: {score}"
        for team, score in enumerate(state.scores)
    )
    embed.add_field(name="🏆 Scores", value=scoreboard, inline=True)

    timer_emoji = {"low": "⚠️", "expired": "🚨"}.get(status, "⏱️")
    embed.add_field(
        name=f"{timer_emoji} Time Remaining",
        value=f"{state.time_remaining}s",
        inline=True
    )

    if state.active_question is not None:
        embed.add_field(
            name="📊 Difficulty",
            value=state.active_question.difficulty.value.capitalize(),
            inline=True
        )
        if state.answer_revealed:
            embed.add_field(name="✅ Answer", value=state.active_question.answer, inline=False)

    if status == "expired":
        embed.set_footer(text="Time's up! Mark the answer with /correct or /incorrect")
    elif status == "low":
        embed.set_footer(text="⚡ Time running out!")
    else:
        embed.set_footer(text=f"Now playing: {current}")

    return embed


class TriviaBot(commands.Bot):
    """Discord presenter for the team trivia board"""

    def __init__(self, config=None):
        intents = discord.Intents.none()
        intents.guilds = True  # Required for slash commands

        bot_config = (config or {}).get('bot', {})

        super().__init__(
            command_prefix=bot_config.get('command_prefix', '!'),
            intents=intents,
            help_command=None
        )

        self.app_config = config or {}
        self.board_title = bot_config.get('title', DEFAULT_BOARD_TITLE)

        self.config_manager: Optional[ConfigManager] = None
        self.engine: Optional[TurnEngine] = None
        self.countdown: Optional[CountdownDriver] = None

        # Board message kept up to date by the countdown
        self.board_message: Optional[discord.Message] = None
        self.board_channel: Optional[discord.abc.Messageable] = None
        self._cue_tasks: set = set()

    async def setup_hook(self):
        """Called when the bot is starting up"""
        try:
            logger.info("Setting up trivia board...")
            self.config_manager = ConfigManager()
            if self.app_config:
                self.config_manager.apply_config(self.app_config)

            self.build_game()
            await self.setup_commands()
            logger.info("Bot setup completed successfully")
        except Exception as e:
            logger.error(f"Error during bot setup: {e}")
            raise

    def build_game(self) -> TurnEngine:
        """
        Create the question source, engine and countdown from current settings.

        Raises:
            QuestionPoolError: If the question pool cannot be loaded
        """
        questions = QuestionBank(self.config_manager.get_question_file()).load()
        source = QuestionSource(questions)
        self.engine = TurnEngine(source, self.config_manager.get_game_settings())
        self.engine.add_listener(self.on_game_event)
        self.countdown = CountdownDriver(self.engine, on_tick=self.refresh_board)
        return self.engine

    async def setup_commands(self):
        """Register all slash commands"""
        @self.tree.command(name="help", description="Show how to run the trivia board")
        async def help_command(interaction: discord.Interaction):
            await self.handle_help(interaction)

        @self.tree.command(name="start_turn", description="Start the current team's turn")
        async def start_turn_command(interaction: discord.Interaction):
            await self.handle_start_turn(interaction)

        @self.tree.command(name="reveal", description="Show or hide the answer")
        async def reveal_command(interaction: discord.Interaction):
            await self.handle_reveal(interaction)

        @self.tree.command(name="correct", description="Mark the answer correct and pass to the next team")
        async def correct_command(interaction: discord.Interaction):
            await self.handle_judge(interaction, True)

        @self.tree.command(name="incorrect", description="Mark the answer incorrect and pass to the next team")
        async def incorrect_command(interaction: discord.Interaction):
            await self.handle_judge(interaction, False)

        @self.tree.command(name="scores", description="Show the scoreboard")
        async def scores_command(interaction: discord.Interaction):
            await self.handle_scores(interaction)

        @self.tree.command(name="new_game", description="Reset all scores and start over with Team 1")
        async def new_game_command(interaction: discord.Interaction):
            await self.handle_new_game(interaction)

        logger.info("Slash commands registered")

    async def on_ready(self):
        """Called when bot is ready"""
        logger.info(f"{self.user} has connected to Discord!")
        try:
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} command(s)")
        except discord.HTTPException as e:
            logger.error(f"Failed to sync commands: {e}")

    # Rendering

    def render_board(self) -> discord.Embed:
        return build_board_embed(
            self.engine.snapshot(), self.engine.settings.low_time_threshold, self.board_title
        )

    async def refresh_board(self, state: Optional[GameState] = None):
        """Edit the board message to reflect the latest state."""
        if self.board_message is None:
            return
        state = state or self.engine.snapshot()
        try:
            await self.board_message.edit(
                embed=build_board_embed(state, self.engine.settings.low_time_threshold, self.board_title)
            )
        except discord.HTTPException as e:
            logger.error(f"Failed to update board message: {e}")

    def on_game_event(self, event: GameEvent, state: GameState) -> None:
        """Post a chat cue for a game event without blocking the engine."""
        if self.board_channel is None:
            return

        if event in (GameEvent.CORRECT, GameEvent.INCORRECT):
            # Play has already passed on; the cue belongs to the judged team
            team = (state.current_team - 1) % state.team_count
        else:
            team = state.current_team
        text = CUE_MESSAGES[event].format(team=team_label(team), seconds=state.time_remaining)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running loop, cue dropped: {event.value}")
            return
        task = loop.create_task(self._send_cue(self.board_channel, text))
        self._cue_tasks.add(task)
        task.add_done_callback(self._cue_tasks.discard)

    async def _send_cue(self, channel: discord.abc.Messageable, text: str):
        try:
            await channel.send(text)
        except discord.HTTPException as e:
            logger.warning(f"Failed to send cue: {e}")

    # Command handlers

    async def handle_help(self, interaction: discord.Interaction):
        """Handle /help command"""
        embed = discord.Embed(
            title="🎯 Trivia Board Commands",
            description="Teams take turns answering one question each",
            color=0x00ff00
        )
        embed.add_field(
            name="🎮 Turn Commands",
            value=(
                "`/start_turn` - Draw a question and start the clock\n"
                "`/reveal` - Show or hide the answer\n"
                "`/correct` - Award a point and pass to the next team\n"
                "`/incorrect` - Pass to the next team without a point"
            ),
            inline=False
        )
        embed.add_field(
            name="📋 Board Commands",
            value=(
                "`/scores` - Show the scoreboard\n"
                "`/new_game` - Reset scores and start again with Team 1\n"
                "`/help` - Show this message"
            ),
            inline=False
        )
        embed.add_field(
            name="⚙️ Current Settings",
            value=f"```\n{self.config_manager.get_settings_summary()}\n```",
            inline=False
        )
        try:
            await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException as e:
            logger.error(f"Failed to send help message: {e}")

    async def handle_start_turn(self, interaction: discord.Interaction):
        """Handle /start_turn command"""
        self.board_channel = interaction.channel
        if not self.engine.start_turn():
            await self.send_warning_response(
                interaction,
                f"{team_label(self.engine.current_team)}'s clock is still running.",
                "⚠️ Turn In Progress"
            )
            return

        try:
            await interaction.response.send_message(embed=self.render_board())
            self.board_message = await interaction.original_response()
        except discord.HTTPException as e:
            logger.error(f"Failed to post board for new turn: {e}")
            self.board_message = None

        self.countdown.start()

    async def handle_reveal(self, interaction: discord.Interaction):
        """Handle /reveal command"""
        if not self.engine.toggle_answer():
            await self.send_warning_response(
                interaction, "There is no question on the board.", "⚠️ No Question"
            )
            return
        await self._respond_with_board(interaction)

    async def handle_judge(self, interaction: discord.Interaction, correct: bool):
        """Handle /correct and /incorrect commands"""
        if not self.engine.judge(correct):
            await self.send_warning_response(
                interaction, "There is no question to judge.", "⚠️ No Question"
            )
            return
        self.countdown.stop()
        await self._respond_with_board(interaction)

    async def handle_scores(self, interaction: discord.Interaction):
        """Handle /scores command"""
        state = self.engine.snapshot()
        embed = discord.Embed(title="🏆 Scoreboard", color=0x3498db)
        for team, score in enumerate(state.scores):
            embed.add_field(name=team_label(team), value=str(score), inline=True)
        if state.leaders:
            leaders = ", ".join(team_label(team) for team in state.leaders)
            embed.set_footer(text=f"Leading: {leaders}")
        try:
            await interaction.response.send_message(embed=embed)
        except discord.HTTPException as e:
            logger.error(f"Failed to send scoreboard: {e}")

    async def handle_new_game(self, interaction: discord.Interaction):
        """Handle /new_game command"""
        self.countdown.stop()
        self.engine.reset()
        self.board_message = None
        await self.send_info_response(
            interaction, "Scores cleared. Team 1 is up!", "🔄 New Game"
        )

    async def _respond_with_board(self, interaction: discord.Interaction):
        embed = self.render_board()
        try:
            await interaction.response.send_message(embed=embed)
        except discord.HTTPException as e:
            logger.error(f"Failed to send board: {e}")
        await self.refresh_board()

    async def send_info_response(self, interaction: discord.Interaction, message: str, title: str = "ℹ️ Information"):
        """Send formatted info response to user"""
        await self._send_notice(interaction, message, title, 0x3498db)

    async def send_warning_response(self, interaction: discord.Interaction, message: str, title: str = "⚠️ Warning"):
        """Send formatted warning response to user"""
        await self._send_notice(interaction, message, title, 0xffaa00)

    async def _send_notice(self, interaction: discord.Interaction, message: str, title: str, color: int):
        embed = discord.Embed(title=title, description=message, color=color)
        try:
            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException:
            logger.error(f"Failed to send response to user: {title}")


async def run_bot(token=None, config=None):
    """Run the bot with proper error handling"""
    if not token:
        token = os.getenv('DISCORD_BOT_TOKEN')

    if not token:
        logger.error("No Discord bot token provided")
        return

    bot = TriviaBot(config)

    try:
        logger.info("Starting Team Trivia Board bot...")
        await bot.start(token)
    except discord.LoginFailure:
        logger.error("Invalid bot token provided")
    except discord.HTTPException as e:
        logger.error(f"HTTP error occurred: {e}")
    finally:
        if not bot.is_closed():
            await bot.close()
