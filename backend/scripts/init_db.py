"""初始化数据库并添加示例数据"""
import asyncio
import sys
from pathlib import Path

# 添加项目根目录到Python路径
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import text

from app.database import init_db, async_session_maker
from app.models import User, Tool


SAMPLE_TOOLS = [
    # Educational Tools
    {
        "name": "Interactive Flashcards",
        "description": "Study Ethiopian heritage with spaced repetition flashcards",
        "long_description": "Master Ethiopian heritage concepts with a flashcard system built on spaced repetition, progress tracking and multimedia content.",
        "category": "Educational Tools",
        "icon": "FaBook",
        "color": "bg-purple-500",
        "path": "/education?section=flashcards",
        "available": True,
        "featured": True,
        "priority": 10,
        "difficulty": "beginner",
        "estimated_time": 15,
        "keywords": ["flashcards", "study", "heritage", "spaced repetition", "learning"],
        "requirements": ["Internet connection", "Modern web browser"],
        "features": [
            "Spaced repetition algorithm",
            "Progress tracking",
            "Multiple difficulty levels",
            "Image and audio support",
            "Offline capability",
        ],
        "screenshots": [
            {"url": "/images/screenshots/flashcards-1.jpg", "caption": "Flashcard study interface", "order": 1},
            {"url": "/images/screenshots/flashcards-2.jpg", "caption": "Progress tracking dashboard", "order": 2},
        ],
        "instructions": [
            {"step": 1, "title": "Choose Your Deck", "description": "Select from various Ethiopian heritage topics"},
            {"step": 2, "title": "Study and Review", "description": "Go through cards at your own pace"},
            {"step": 3, "title": "Track Progress", "description": "Monitor your learning progress and statistics"},
        ],
        "tool_metadata": {
            "version": "2.1.0",
            "tags": ["study", "flashcards", "mobile-friendly"],
            "platform": ["web", "mobile"],
            "language": ["en", "am"],
        },
    },
    {
        "name": "Practice Quizzes",
        "description": "Test your knowledge with interactive quizzes",
        "long_description": "Challenge yourself with quizzes covering Ethiopian heritage, with detailed explanations and performance analytics.",
        "category": "Educational Tools",
        "icon": "FaGamepad",
        "color": "bg-green-500",
        "path": "/education?section=quizzes",
        "available": True,
        "featured": True,
        "priority": 9,
        "difficulty": "intermediate",
        "estimated_time": 20,
        "keywords": ["quiz", "test", "assessment", "heritage", "knowledge"],
        "requirements": ["Internet connection", "User account (recommended)"],
        "features": ["Multiple question types", "Instant feedback", "Performance analytics"],
    },
    {
        "name": "Educational Games",
        "description": "Learn through fun and engaging games",
        "category": "Educational Tools",
        "icon": "FaGamepad",
        "color": "bg-red-500",
        "path": "/visitor/games",
        "priority": 7,
        "estimated_time": 25,
        "keywords": ["games", "fun", "interactive", "heritage", "educational"],
        "requirements": ["Modern web browser", "Audio capability (optional)"],
        "features": ["Various game types", "Progressive difficulty", "Leaderboards"],
    },
    # Navigation & Geography
    {
        "name": "Heritage Map",
        "description": "Interactive map of Ethiopian heritage sites and museums",
        "long_description": "Explore historical sites, museums and cultural centers across Ethiopia on an interactive map.",
        "category": "Navigation & Geography",
        "icon": "FaMapMarkerAlt",
        "color": "bg-blue-500",
        "path": "/map",
        "featured": True,
        "priority": 8,
        "estimated_time": 30,
        "keywords": ["map", "heritage sites", "museums", "geography", "navigation"],
        "requirements": ["Internet connection", "Location access (optional)"],
        "features": ["Interactive map interface", "Detailed site information", "Virtual tour integration"],
    },
    # Language & Culture
    {
        "name": "Language Guide",
        "description": "Learn basic Amharic phrases and cultural etiquette",
        "category": "Language & Culture",
        "icon": "FaLanguage",
        "color": "bg-green-500",
        "path": "/visitor/language",
        "available": False,
        "priority": 5,
        "estimated_time": 45,
        "keywords": ["amharic", "language", "culture", "phrases", "etiquette"],
        "requirements": ["Audio capability", "Internet connection"],
        "features": ["Audio pronunciation", "Cultural context", "Common phrases"],
    },
    {
        "name": "Cultural Calendar",
        "description": "Ethiopian holidays, festivals, and important dates",
        "category": "Language & Culture",
        "icon": "FaCalendarAlt",
        "color": "bg-purple-500",
        "path": "/visitor/cultural-calendar",
        "available": False,
        "priority": 6,
        "estimated_time": 15,
        "keywords": ["calendar", "holidays", "festivals", "culture", "celebrations"],
        "requirements": ["Internet connection"],
        "features": ["Annual calendar view", "Event details", "Historical context"],
    },
    # Utilities & Converters
    {
        "name": "Ethiopian Calendar",
        "description": "Convert between Ethiopian and Gregorian calendars",
        "category": "Utilities & Converters",
        "icon": "FaCalculator",
        "color": "bg-orange-500",
        "path": "/visitor/converters",
        "available": False,
        "priority": 4,
        "estimated_time": 5,
        "keywords": ["calendar", "converter", "dates", "ethiopian calendar", "gregorian"],
        "requirements": ["Modern web browser"],
        "features": ["Bi-directional conversion", "Historical date support", "Offline functionality"],
    },
    # Mobile & Apps
    {
        "name": "Mobile App",
        "description": "Download our mobile app for on-the-go learning",
        "category": "Mobile & Apps",
        "icon": "FaMobile",
        "color": "bg-pink-500",
        "path": "/visitor/mobile",
        "external_url": "https://apps.example.com/ethioheritage",
        "available": False,
        "priority": 3,
        "estimated_time": 10,
        "keywords": ["mobile", "app", "download", "offline", "learning"],
        "requirements": ["iOS 12+ or Android 8+", "Storage space (100MB)"],
        "features": ["Offline content access", "Push notifications", "Progress synchronization"],
        "tool_metadata": {"version": "1.2.0", "platform": ["ios", "android"]},
    },
]


async def init_sample_data():
    """初始化示例数据"""
    await init_db()

    async with async_session_maker() as session:
        # 强制清空所有表（用于重新初始化）
        await session.execute(text("DELETE FROM tool_review_votes"))
        await session.execute(text("DELETE FROM tool_reviews"))
        await session.execute(text("DELETE FROM tool_usages"))
        await session.execute(text("DELETE FROM tools"))
        await session.execute(text("DELETE FROM users"))
        await session.commit()

        print("📝 开始添加示例数据...")

        admin = User(
            first_name="Site",
            last_name="Admin",
            email="admin@example.com",
            role="admin",
        )
        session.add(admin)
        await session.flush()

        for tool_data in SAMPLE_TOOLS:
            session.add(Tool(created_by=admin.id, **tool_data))
        await session.commit()

        print("✅ 示例数据添加成功！")
        print(f"   - 创建了管理员：{admin.email}（X-User-Id: {admin.id}）")
        print(f"   - 创建了 {len(SAMPLE_TOOLS)} 个工具")


if __name__ == "__main__":
    print("=" * 60)
    print("🚀 文化遗产工具平台 - 数据库初始化")
    print("=" * 60)

    asyncio.run(init_sample_data())

    print("\n✨ 初始化完成！现在可以启动服务了。")
    print("   运行命令: uvicorn app.main:app --reload --port 8000")
    print("=" * 60)
