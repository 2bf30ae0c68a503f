# backend/seed.py
"""Starter catalog: experiments, NSW curriculum units, unit mappings and quizzes."""
import logging

from schemas import CurriculumUnitCreate, ExperimentCreate, QuizCreate, QuizQuestionCreate

logger = logging.getLogger(__name__)

EXPERIMENTS = [
    # Biology
    {
        "title": "Growing Beans: Watch Seeds Sprout",
        "description": "Observe the life cycle of a bean plant from seed to sprout. Learn about germination, root systems, and plant growth in this hands-on biology experiment.",
        "category": "Biology",
        "curriculum_stage": "K-6",
        "difficulty": "beginner",
        "duration": 20,
        "materials_needed": ["Bean seeds (3-4)", "Clear plastic cup or jar", "Paper towel", "Water", "Sunny windowsill"],
        "household_items_only": True,
        "thumbnail_url": "/assets/images/biology_plant_growth.png",
        "steps": [
            {"step_number": 1, "title": "Prepare the Container", "description": "Line a clear plastic cup or jar with a damp paper towel so it covers the inside walls."},
            {"step_number": 2, "title": "Place the Seeds", "description": "Place 3-4 bean seeds between the paper towel and the container wall, spaced evenly."},
            {"step_number": 3, "title": "Keep Moist and Observe", "description": "Put the container in a sunny spot, keep the towel moist and record changes over 7-10 days."},
        ],
        "science_explained": "Seeds contain everything needed to start a new plant. With water, warmth and oxygen, germination begins: the seed coat softens, a root (radicle) emerges to anchor the plant and absorb water, then a shoot grows toward the light. The seed leaves feed the plant until it can photosynthesise.",
        "learning_outcomes": [
            "Understand the process of seed germination",
            "Observe plant life cycle stages",
            "Learn about plant structures (roots, stems, leaves)",
            "Practice scientific observation and recording",
        ],
        "safety_notes": ["Wash hands after handling seeds"],
    },
    {
        "title": "Bread Mold Experiment",
        "description": "Explore how mold grows on bread under different conditions. Investigate the factors that affect microorganism growth.",
        "category": "Biology",
        "curriculum_stage": "7-10 Life Skills",
        "difficulty": "intermediate",
        "duration": 25,
        "materials_needed": ["4 slices of bread", "4 plastic zip-lock bags", "Water spray bottle", "Marker for labeling", "Dark cupboard"],
        "household_items_only": True,
        "thumbnail_url": "/assets/images/biology_plant_growth.png",
        "steps": [
            {
                "step_number": 1,
                "title": "Prepare Bread Samples",
                "description": "Leave one slice dry, lightly spray the second, heavily spray the third and keep the fourth in its packaging as a control.",
                "safety_warning": "Do not open the bags once sealed. Mold can cause allergic reactions.",
            },
            {"step_number": 2, "title": "Seal and Label", "description": "Seal each slice in its own bag and label it with the conditions used."},
            {"step_number": 3, "title": "Store and Observe", "description": "Store the bags in a dark cupboard and check them daily for a week."},
        ],
        "science_explained": "Mold is a fungus that grows from microscopic spores floating in the air. Spores that land on moist, warm food germinate and spread as thread-like hyphae, breaking the food down for energy.",
        "learning_outcomes": [
            "Understand how microorganisms grow",
            "Identify conditions that favour mold growth",
            "Practice running a controlled experiment",
        ],
        "safety_notes": [
            "Never open the sealed bags after mold appears",
            "Dispose of all bags sealed in trash when finished",
            "Wash hands thoroughly if bags are touched",
        ],
    },
    # Chemistry
    {
        "title": "Volcano Eruption: Acid-Base Reaction",
        "description": "Create a spectacular volcano eruption using household chemicals. Learn about acid-base reactions and chemical changes.",
        "category": "Chemistry",
        "curriculum_stage": "K-6",
        "difficulty": "beginner",
        "duration": 15,
        "materials_needed": ["Baking soda (2 tablespoons)", "White vinegar (1/2 cup)", "Red food coloring", "Dish soap (1 tablespoon)", "Plastic bottle or cup", "Tray to catch overflow"],
        "household_items_only": True,
        "thumbnail_url": "/assets/images/volcano_eruption.png",
        "steps": [
            {"step_number": 1, "title": "Build Your Volcano", "description": "Stand a plastic bottle on a tray and optionally shape a volcano around it with clay."},
            {"step_number": 2, "title": "Add Ingredients", "description": "Put the baking soda, dish soap and a few drops of food coloring into the bottle."},
            {"step_number": 3, "title": "Create the Eruption", "description": "Quickly pour in the vinegar, step back and watch the eruption."},
        ],
        "science_explained": "Vinegar contains acetic acid and baking soda is sodium bicarbonate, a base. They react to form carbon dioxide gas, water and sodium acetate. The gas bubbles push the foamy mixture up and out like lava.",
        "learning_outcomes": [
            "Understand acid-base chemical reactions",
            "Observe gas production in a chemical reaction",
            "Learn about volcanoes and their eruptions",
            "Practice safe chemical handling",
        ],
        "safety_notes": ["Conduct experiment on a protected surface or outdoors", "Avoid getting mixture in eyes"],
    },
    {
        "title": "Rainbow in a Jar: Density Layers",
        "description": "Create a beautiful rainbow by layering liquids of different densities. Explore the concept of density and how it affects liquid behavior.",
        "category": "Chemistry",
        "curriculum_stage": "7-10 Life Skills",
        "difficulty": "intermediate",
        "duration": 30,
        "materials_needed": ["Tall clear glass or jar", "Honey", "Dish soap", "Water", "Vegetable oil", "Rubbing alcohol", "Food coloring (various colors)"],
        "household_items_only": True,
        "thumbnail_url": "/assets/images/chemistry_mixing_colors.png",
        "steps": [
            {"step_number": 1, "title": "Prepare Colored Liquids", "description": "Color the water blue and the rubbing alcohol red; leave the honey, soap and oil as they are."},
            {"step_number": 2, "title": "Layer from Densest to Least Dense", "description": "Pour honey first, then dish soap, water and oil, each slowly down the side of the jar."},
            {
                "step_number": 3,
                "title": "Add the Top Layer",
                "description": "Very carefully pour the rubbing alcohol on top and watch the layers form.",
                "safety_warning": "Keep rubbing alcohol away from heat sources and flames.",
            },
        ],
        "science_explained": "Density is the mass in a given volume. Liquids of different densities separate into layers with the densest at the bottom, which is why oil floats on water and icebergs float in the ocean.",
        "learning_outcomes": [
            "Understand the concept of density",
            "Learn why different liquids layer",
            "Practice careful measuring and pouring techniques",
        ],
    },
    # Physics
    {
        "title": "Make a Rainbow with Sunlight",
        "description": "Use water and sunlight to create your own rainbow. Learn about light refraction and the visible spectrum.",
        "category": "Physics",
        "curriculum_stage": "K-6",
        "difficulty": "beginner",
        "duration": 10,
        "materials_needed": ["Clear glass filled with water", "White paper or wall", "Sunny day or flashlight", "Small mirror (optional)"],
        "household_items_only": True,
        "thumbnail_url": "/assets/images/rainbow_refraction.png",
        "steps": [
            {"step_number": 1, "title": "Set Up Your Glass", "description": "Fill a clear glass about 3/4 full with water and put it near a sunny window."},
            {"step_number": 2, "title": "Position the Paper", "description": "Hold white paper on the opposite side of the glass from the sunlight."},
            {"step_number": 3, "title": "Find Your Rainbow", "description": "Adjust the glass and paper until a rainbow appears on the paper."},
        ],
        "science_explained": "White light contains every color. Light bends (refracts) as it passes through water, and each color bends by a slightly different angle, spreading white light into a spectrum just as raindrops do in the sky.",
        "learning_outcomes": [
            "Understand light refraction",
            "Learn about the visible spectrum",
            "Discover how rainbows form in nature",
        ],
    },
    {
        "title": "Build a Simple Pendulum",
        "description": "Create a pendulum and explore how length affects its swing period. Investigate the physics of motion and gravity.",
        "category": "Physics",
        "curriculum_stage": "11-12 Science Life Skills",
        "difficulty": "advanced",
        "duration": 35,
        "materials_needed": ["String or thread (1 meter)", "Small weight (washer, key, or similar)", "Ruler or tape measure", "Stopwatch or phone timer", "Pencil and support stand", "Notebook for recording"],
        "household_items_only": True,
        "thumbnail_url": "/assets/images/physics_forces_motion.png",
        "steps": [
            {"step_number": 1, "title": "Build the Pendulum", "description": "Tie a weight to a 50cm string and hang it from a fixed support."},
            {"step_number": 2, "title": "Measure the Period", "description": "Release the weight from 15cm to one side, time 10 full swings and divide by 10."},
            {"step_number": 3, "title": "Test Different Lengths", "description": "Repeat the timing with 30cm and 70cm strings and record the results in a table."},
            {"step_number": 4, "title": "Analyze Your Results", "description": "Graph length against period and describe the pattern."},
        ],
        "science_explained": "A pendulum's period depends on its length, not its weight: T = 2π√(L/g). Doubling the length increases the period by about 1.4 times, the principle behind pendulum clocks.",
        "learning_outcomes": [
            "Understand periodic motion",
            "Learn about the relationship between length and period",
            "Practice data collection and graphing",
        ],
    },
    # Earth Science
    {
        "title": "Rock and Mineral Observation",
        "description": "Examine different rocks and minerals to learn about their properties. Develop classification skills and understand Earth's materials.",
        "category": "Earth Science",
        "curriculum_stage": "K-6",
        "difficulty": "beginner",
        "duration": 20,
        "materials_needed": ["Various rocks from outside", "Magnifying glass", "Water", "Vinegar", "Notebook and pencil", "Nail or coin"],
        "household_items_only": True,
        "thumbnail_url": "/assets/images/earth_science_geology.png",
        "steps": [
            {"step_number": 1, "title": "Collect Rock Samples", "description": "Gather 5-6 rocks that differ in color, texture or size."},
            {"step_number": 2, "title": "Observe Physical Properties", "description": "Examine each rock with a magnifying glass and try scratching it with a nail."},
            {"step_number": 3, "title": "Test Reactivity", "description": "Drop a little vinegar on each rock; fizzing suggests calcium carbonate."},
            {"step_number": 4, "title": "Classify Your Rocks", "description": "Group the rocks by similar properties and sketch each group."},
        ],
        "science_explained": "Rocks are made of minerals. Igneous rocks form from cooled magma, sedimentary rocks from compressed sediments and metamorphic rocks from heat and pressure. Hardness, color, texture and reactivity help identify them.",
        "learning_outcomes": [
            "Learn to identify rock properties",
            "Understand basic rock types",
            "Practice scientific observation and classification",
        ],
    },
    {
        "title": "Water Cycle in a Bag",
        "description": "Create a mini water cycle to observe evaporation, condensation, and precipitation. Learn about Earth's water systems.",
        "category": "Earth Science",
        "curriculum_stage": "7-10 Life Skills",
        "difficulty": "intermediate",
        "duration": 20,
        "materials_needed": ["Clear plastic zip-lock bag", "Permanent marker (blue)", "Water (1/4 cup)", "Blue food coloring (optional)", "Tape", "Sunny window"],
        "household_items_only": True,
        "thumbnail_url": "/assets/images/earth_science_geology.png",
        "steps": [
            {"step_number": 1, "title": "Draw the Water Cycle", "description": "Draw a sun, clouds and waves on the outside of the bag."},
            {"step_number": 2, "title": "Add Water", "description": "Pour in the water with a drop of coloring and seal the bag tightly."},
            {"step_number": 3, "title": "Hang in Sunlight", "description": "Tape the bag to a sunny window."},
            {"step_number": 4, "title": "Observe Changes", "description": "Check every hour for condensation on the sides and water collecting at the bottom."},
        ],
        "science_explained": "The sun's heat evaporates the water, the vapor condenses into droplets on the cooler bag and the droplets run down as precipitation, the same cycle that moves water between oceans, clouds and land.",
        "learning_outcomes": [
            "Understand the water cycle stages",
            "Observe evaporation and condensation",
            "Learn about Earth's water systems",
        ],
    },
]

CURRICULUM_UNITS = [
    {"unit_id": "es1-t1", "stage": "Early Stage 1", "term": 1, "name": "Living things grow and change", "description": "Students observe how plants and animals grow and change over time.", "outcomes": ["STe-3LW-ST"], "weeks": 8},
    {"unit_id": "es1-t2", "stage": "Early Stage 1", "term": 2, "name": "Our Earth", "description": "Students explore rocks, soil and water in their local environment.", "outcomes": ["STe-5ES-ST"], "weeks": 8},
    {"unit_id": "es1-t4", "stage": "Early Stage 1", "term": 4, "name": "Materials around us", "description": "Students investigate everyday materials and how they can change.", "outcomes": ["STe-6PW-ST"], "weeks": 8},
    {"unit_id": "s1-t1", "stage": "Stage 1", "term": 1, "name": "Plants and their needs", "description": "Students investigate what plants need to survive and grow.", "outcomes": ["ST1-4LW-S"], "weeks": 8},
    {"unit_id": "s1-t3", "stage": "Stage 1", "term": 3, "name": "Earth's resources", "description": "Students examine how Earth's resources such as water and rocks are used.", "outcomes": ["ST1-8ES"], "weeks": 8},
    {"unit_id": "s1-t4", "stage": "Stage 1", "term": 4, "name": "Mixing and changing materials", "description": "Students observe how materials change when they are combined.", "outcomes": ["ST1-6MW-S"], "weeks": 8},
    {"unit_id": "s1-t5", "stage": "Stage 1", "term": 5, "name": "Light and shadows", "description": "Students explore sources of light and how light travels.", "outcomes": ["ST1-7PW-ST"], "weeks": 8},
    {"unit_id": "s1-t6", "stage": "Stage 1", "term": 6, "name": "Seeing colour", "description": "Students investigate colour and how we see it.", "outcomes": ["ST1-7PW-ST"], "weeks": 8},
    {"unit_id": "comp-a-t2", "stage": "7-10 Life Skills", "component": "Component A", "term": 2, "name": "Living things and food", "description": "Students investigate microorganisms and food safety.", "outcomes": ["SCLS-10LW"], "weeks": 10},
    {"unit_id": "comp-a-t4", "stage": "7-10 Life Skills", "component": "Component A", "term": 4, "name": "Properties of matter", "description": "Students compare the properties of everyday substances.", "outcomes": ["SCLS-13CW"], "weeks": 10},
    {"unit_id": "comp-b-t2", "stage": "7-10 Life Skills", "component": "Component B", "term": 2, "name": "Earth systems", "description": "Students model the water cycle and weather.", "outcomes": ["SCLS-11ES"], "weeks": 10},
    {"unit_id": "comp-c-t2", "stage": "7-10 Life Skills", "component": "Component C", "term": 2, "name": "Health and hygiene", "description": "Students link microorganisms to hygiene practices.", "outcomes": ["SCLS-16LW"], "weeks": 10},
    {"unit_id": "comp-e-t3", "stage": "11-12 Science Life Skills", "component": "Component E", "term": 3, "name": "Forces and motion", "description": "Students investigate forces, motion and simple machines.", "outcomes": ["SCLS6-8PW"], "weeks": 10},
]

# experiment title -> curriculum unit codes
UNIT_MAPPINGS = {
    "Growing Beans: Watch Seeds Sprout": ["es1-t1", "s1-t1"],
    "Bread Mold Experiment": ["comp-a-t2", "comp-c-t2"],
    "Volcano Eruption: Acid-Base Reaction": ["es1-t4", "s1-t4"],
    "Rainbow in a Jar: Density Layers": ["comp-a-t4"],
    "Make a Rainbow with Sunlight": ["s1-t5", "s1-t6"],
    "Build a Simple Pendulum": ["comp-e-t3"],
    "Rock and Mineral Observation": ["es1-t2", "s1-t3"],
    "Water Cycle in a Bag": ["comp-b-t2", "s1-t3"],
}

QUIZZES = {
    "Growing Beans: Watch Seeds Sprout": {
        "title": "Bean Growing Quiz",
        "description": "Test your knowledge about plant growth and germination",
        "passing_score": 70,
        "questions": [
            ("What process happens when a seed starts to grow?", ["Photosynthesis", "Germination", "Pollination", "Respiration"], 1,
             "Germination is the process by which a seed begins to grow into a new plant."),
            ("What do seeds need to germinate?", ["Only water", "Only sunlight", "Water and warmth", "Only soil"], 2,
             "Seeds need water and warmth to germinate. Sunlight becomes important after the plant has sprouted."),
            ("Which part of the plant grows first from a germinating seed?", ["Leaves", "Stem", "Root", "Flower"], 2,
             "The root grows first to anchor the plant and absorb water and nutrients from the soil."),
            ("Why did we use a clear container in this experiment?",
             ["To make it look nice", "To observe the roots growing", "Because plastic is cheap", "To keep the seeds warm"], 1,
             "A clear container lets us observe the whole germination process, including root development."),
        ],
    },
    "Bread Mold Experiment": {
        "title": "Bread Mold Experiment Quiz",
        "description": "Test your understanding of mold growth and microorganisms",
        "passing_score": 70,
        "questions": [
            ("What type of organism is mold?", ["Bacteria", "Virus", "Fungus", "Plant"], 2,
             "Mold is a type of fungus that grows in multicellular filaments called hyphae."),
            ("What conditions help mold grow faster?", ["Dry and cold", "Dry and warm", "Moist and warm", "Moist and cold"], 2,
             "Mold grows best in warm, moist conditions where it can break down organic matter."),
            ("Why should you never eat moldy food?",
             ["It tastes bad", "Mold can produce harmful toxins", "It looks unappetizing", "It has no nutrients"], 1,
             "Some molds produce mycotoxins that can be harmful to human health when consumed."),
        ],
    },
}


def related_ids_for(experiment, experiments):
    """Two experiments from the same category, then one more from the same stage"""
    same_category = [e.id for e in experiments if e.category == experiment.category and e.id != experiment.id][:2]
    same_stage = [
        e.id
        for e in experiments
        if e.curriculum_stage == experiment.curriculum_stage and e.id != experiment.id and e.id not in same_category
    ][:1]
    return same_category + same_stage


def seed_storage(storage):
    logger.info("Seeding curriculum units...")
    for unit in CURRICULUM_UNITS:
        storage.create_curriculum_unit(CurriculumUnitCreate(**unit))

    logger.info("Seeding experiments...")
    created = [storage.create_experiment(ExperimentCreate(**data)) for data in EXPERIMENTS]
    by_title = {exp.title: exp for exp in created}

    for exp in created:
        related = related_ids_for(exp, created)
        if related:
            storage.set_related_experiments(exp.id, related)

    mapping_count = 0
    for title, unit_ids in UNIT_MAPPINGS.items():
        for unit_id in unit_ids:
            storage.link_experiment_to_unit(by_title[title].id, unit_id)
            mapping_count += 1

    for title, quiz_data in QUIZZES.items():
        quiz = storage.create_quiz(
            QuizCreate(
                experiment_id=by_title[title].id,
                title=quiz_data["title"],
                description=quiz_data["description"],
                passing_score=quiz_data["passing_score"],
            )
        )
        for order, (text, options, correct, explanation) in enumerate(quiz_data["questions"]):
            storage.create_quiz_question(
                QuizQuestionCreate(
                    quiz_id=quiz.id,
                    question_text=text,
                    options=options,
                    correct_answer_index=correct,
                    explanation=explanation,
                    order_index=order,
                )
            )

    logger.info(
        "Seeded %d experiments, %d curriculum units, %d mappings, %d quizzes",
        len(created), len(CURRICULUM_UNITS), mapping_count, len(QUIZZES),
    )
