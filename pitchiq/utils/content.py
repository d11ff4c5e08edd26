"""Static bilingual strings, seed drills and seed stats."""
from typing import Any, Dict, List

from .session import Drill, Language, UserStats

INITIAL_STATS = UserStats(
    technical=65,
    physical=70,
    tactical=50,
    mental=60,
    trainingHours=12.5,
    drillsCompleted=24,
)

SAMPLE_DRILLS: Dict[str, List[Drill]] = {
    "en": [
        Drill(
            id="1",
            title="Cone Weave & Shoot",
            category="Technical",
            difficulty="Beginner",
            duration="15 mins",
            description="Set up 5 cones in a line 1m apart. Dribble through using inside/outside of foot, then shoot at goal.",
            equipment=["5 Cones", "1 Ball", "Goal"],
        ),
        Drill(
            id="2",
            title="Box-to-Box Stamina",
            category="Physical",
            difficulty="Intermediate",
            duration="20 mins",
            description="Sprint from one 18-yard box line to the other. Jog back. Repeat 10 times. Rest 2 mins. Do 2 sets.",
            equipment=["Field"],
        ),
        Drill(
            id="3",
            title="Wall Pass Mastery",
            category="Technical",
            difficulty="Intermediate",
            duration="10 mins",
            description="Pass against a wall using one touch. Alternate feet. Focus on locking the ankle.",
            equipment=["1 Ball", "Wall"],
        ),
    ],
    "zh": [
        Drill(
            id="1",
            title="绕桩射门",
            category="Technical",
            difficulty="Beginner",
            duration="15 分钟",
            description="将5个标志桶排成一列，间距1米。使用脚内侧/外侧绕桩盘带，然后射门。",
            equipment=["5个标志桶", "1个足球", "球门"],
        ),
        Drill(
            id="2",
            title="禁区往返跑",
            category="Physical",
            difficulty="Intermediate",
            duration="20 分钟",
            description="从一个18码线冲刺到另一个。慢跑返回。重复10次。休息2分钟。做2组。",
            equipment=["足球场"],
        ),
        Drill(
            id="3",
            title="墙球练习",
            category="Technical",
            difficulty="Intermediate",
            duration="10 分钟",
            description="对着墙壁进行一脚传球。左右脚交替。专注于锁紧脚踝。",
            equipment=["1个足球", "墙壁"],
        ),
    ],
}

# Plan form choices
DRILL_LEVELS = ["Beginner", "Intermediate", "Advanced"]
PLAN_GOALS = [
    "Technique & Ball Control",
    "Speed & Conditioning",
    "Tactical Awareness",
    "Shooting & Finishing",
    "Defense & Positioning",
]
PLAN_AVAILABILITY = ["2 days/week", "3 days/week", "4 days/week", "5 days/week", "Every day"]

TRANSLATIONS: Dict[str, Dict[str, Dict[str, str]]] = {
    "en": {
        "nav": {
            "stats": "Stats",
            "train": "Train",
            "analyst": "Analyst",
            "tactics": "Tactics",
            "coach": "Coach",
        },
        "dashboard": {
            "trainingHours": "Training Hours",
            "drillsDone": "Drills Done",
            "playerAttributes": "Player Attributes",
            "weeklyFocus": "Weekly Focus",
            "noPlan": "No active plan. Generate one in Drills!",
            "following": "Following",
        },
        "drills": {
            "header": "Training",
            "btnPlan": "Plan",
            "btnNew": "New",
            "library": "Library",
            "myPlan": "My Plan",
            "generateTitle": "Generate Single Drill",
            "promptPlaceholder": "Focus area (e.g. Speed)",
            "cancel": "Cancel",
            "generate": "Generate",
            "planTitle": "Create Weekly Plan",
            "level": "Level",
            "goal": "Primary Goal",
            "availability": "Availability",
            "createPlan": "Create Plan",
            "day": "Day",
        },
        "analyst": {
            "header": "Video Analyst",
            "uploadTitle": "Upload a clip of your technique",
            "uploadSubtitle": "(Dribbling, Shooting, etc)",
            "dragDrop": "or Drag & Drop Video",
            "selectBtn": "Select Video",
            "clear": "Clear",
            "analyze": "Analyze Technique",
            "reportTitle": "Technique Report",
            "score": "Score",
            "mechanics": "Mechanics",
            "corrections": "Corrections",
            "recommendation": "Recommended Drill",
        },
        "tactics": {
            "header": "Tactical IQ",
            "newScenario": "New Scenario",
            "emptyState": "Start a simulation to test your tactical decision making.",
            "startSim": "Start Simulation",
            "analysis": "Coach Analysis",
            "next": "Next Scenario",
        },
        "coach": {
            "welcome": "Welcome to PitchIQ. I'm your tactical analyst. Ask me about playing positions, tactical concepts, or mental preparation.",
            "placeholder": "Ask about tactics, rules, or analysis...",
            "isTyping": "Coach is typing...",
        },
        "common": {
            "loading": "Loading...",
            "hrs": "hrs",
        },
        "errors": {
            "drills": "Couldn't generate drills right now. Please try again.",
            "plan": "Couldn't create a plan right now. Please try again.",
            "video": "Couldn't analyze this clip. Try a shorter, well-lit video.",
            "scenario": "Couldn't load a scenario right now. Please try again.",
        },
        "categories": {
            "Technical": "Technical",
            "Physical": "Physical",
            "Tactical": "Tactical",
            "Mental": "Mental",
        },
        "difficulties": {
            "Beginner": "Beginner",
            "Intermediate": "Intermediate",
            "Advanced": "Advanced",
            "Pro": "Pro",
        },
    },
    "zh": {
        "nav": {
            "stats": "数据",
            "train": "训练",
            "analyst": "分析",
            "tactics": "战术",
            "coach": "教练",
        },
        "dashboard": {
            "trainingHours": "训练时长",
            "drillsDone": "完成训练",
            "playerAttributes": "球员属性",
            "weeklyFocus": "本周重点",
            "noPlan": "暂无计划。请在训练页面生成！",
            "following": "正在执行",
        },
        "drills": {
            "header": "训练中心",
            "btnPlan": "计划",
            "btnNew": "新建",
            "library": "训练库",
            "myPlan": "我的计划",
            "generateTitle": "生成专项训练",
            "promptPlaceholder": "训练重点 (例如：速度)",
            "cancel": "取消",
            "generate": "生成",
            "planTitle": "制定周计划",
            "level": "水平",
            "goal": "主要目标",
            "availability": "训练频率",
            "createPlan": "生成计划",
            "day": "天/周",
        },
        "analyst": {
            "header": "视频分析师",
            "uploadTitle": "上传你的技术动作视频",
            "uploadSubtitle": "(盘带, 射门, 等)",
            "dragDrop": "或拖拽视频上传",
            "selectBtn": "选择视频",
            "clear": "清除",
            "analyze": "分析技术",
            "reportTitle": "技术分析报告",
            "score": "评分",
            "mechanics": "动作机制",
            "corrections": "纠正建议",
            "recommendation": "推荐训练",
        },
        "tactics": {
            "header": "战术智商",
            "newScenario": "新场景",
            "emptyState": "开始模拟以测试你的战术决策能力。",
            "startSim": "开始模拟",
            "analysis": "教练分析",
            "next": "下一场景",
        },
        "coach": {
            "welcome": "欢迎来到PitchIQ。我是你的战术分析师。你可以问我关于位置、战术概念或心理准备的问题。",
            "placeholder": "询问战术、规则或分析...",
            "isTyping": "教练正在输入...",
        },
        "common": {
            "loading": "加载中...",
            "hrs": "小时",
        },
        "errors": {
            "drills": "暂时无法生成训练，请稍后再试。",
            "plan": "暂时无法生成计划，请稍后再试。",
            "video": "无法分析该视频。请尝试更短、光线更好的视频。",
            "scenario": "暂时无法加载场景，请稍后再试。",
        },
        "categories": {
            "Technical": "技术",
            "Physical": "体能",
            "Tactical": "战术",
            "Mental": "心理",
        },
        "difficulties": {
            "Beginner": "初学者",
            "Intermediate": "中级",
            "Advanced": "高级",
            "Pro": "职业",
        },
    },
}

COACH_SYSTEM_INSTRUCTION = """You are a world-class football (soccer) coach.
Your goal is to improve the user's "Football IQ".
- Explain complex tactical concepts simply.
- Analyze scenarios users give you.
- Be encouraging but demanding.
- You must reply in {reply_language}."""


def seed_drills(language: Language) -> List[Drill]:
    """Fresh copy of the language's seed drill list."""
    return list(SAMPLE_DRILLS[language])


def translate(language: Language, key: str) -> str:
    """Look up a dotted key such as "coach.welcome"."""
    section, _, name = key.partition(".")
    return TRANSLATIONS[language][section][name]


def translations_for(language: Language) -> Dict[str, Any]:
    return TRANSLATIONS[language]


def response_language(language: Language) -> str:
    """Language name used in generation prompts."""
    return "Chinese" if language == "zh" else "English"


def coach_system_instruction(language: Language) -> str:
    reply_language = "Chinese (Simplified)" if language == "zh" else "English"
    return COACH_SYSTEM_INSTRUCTION.format(reply_language=reply_language)
