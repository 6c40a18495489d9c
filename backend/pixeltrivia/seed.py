import json

from pixeltrivia import db
from pixeltrivia.models import Question

# (question, options, correct option index, category, difficulty)
SAMPLE_QUESTIONS = [
    ('What is the capital of France?', ['London', 'Berlin', 'Paris', 'Madrid'], 2, 'Geography', 'easy'),
    ('What is the capital of Japan?', ['Seoul', 'Beijing', 'Tokyo', 'Bangkok'], 2, 'Geography', 'easy'),
    ('Which country is known as the Land of the Rising Sun?', ['China', 'Japan', 'Thailand', 'South Korea'], 1, 'Geography', 'easy'),
    ('Which ocean lies between Africa and Australia?', ['Pacific', 'Atlantic', 'Indian', 'Arctic'], 2, 'Geography', 'medium'),
    ('What do we call frozen water?', ['Steam', 'Ice', 'Rain', 'Snow'], 1, 'Science', 'easy'),
    ("Which gas makes up most of Earth's atmosphere?", ['Oxygen', 'Nitrogen', 'Carbon Dioxide', 'Hydrogen'], 1, 'Science', 'medium'),
    ('How many bones are in the adult human body?', ['196', '206', '216', '226'], 1, 'Science', 'hard'),
    ('Which element has the atomic number 1?', ['Helium', 'Hydrogen', 'Oxygen', 'Carbon'], 1, 'Science', 'medium'),
    ('In which year did the Titanic sink?', ['1910', '1911', '1912', '1913'], 2, 'History', 'medium'),
    ('In which year did the Berlin Wall fall?', ['1987', '1988', '1989', '1990'], 2, 'History', 'medium'),
    ('Who painted the Mona Lisa?', ['Vincent van Gogh', 'Leonardo da Vinci', 'Pablo Picasso', 'Michelangelo'], 1, 'Art', 'medium'),
    ('Who wrote "1984"?', ['George Orwell', 'Aldous Huxley', 'Ray Bradbury', 'H.G. Wells'], 0, 'Literature', 'medium'),
    ('What is 2 + 2?', ['3', '4', '5', '6'], 1, 'Mathematics', 'easy'),
    ('What is the value of Pi rounded to two decimal places?', ['3.12', '3.14', '3.16', '3.18'], 1, 'Mathematics', 'medium'),
    ('Which animal says "moo"?', ['Dog', 'Cat', 'Cow', 'Pig'], 2, 'Animals', 'easy'),
    ('What is the largest bird in the world?', ['Eagle', 'Ostrich', 'Albatross', 'Condor'], 1, 'Animals', 'medium'),
    ('Who composed "The Four Seasons"?', ['Mozart', 'Beethoven', 'Vivaldi', 'Bach'], 2, 'Music', 'hard'),
    ('Who sang "Bohemian Rhapsody"?', ['The Beatles', 'Queen', 'Led Zeppelin', 'Pink Floyd'], 1, 'Music', 'medium'),
    ('In which sport would you perform a slam dunk?', ['Tennis', 'Basketball', 'Volleyball', 'Football'], 1, 'Sports', 'easy'),
    ('Which country is known for inventing pizza?', ['France', 'Spain', 'Italy', 'Greece'], 2, 'Food', 'easy'),
    ('What color do you get when you mix red and blue?', ['Green', 'Purple', 'Orange', 'Yellow'], 1, 'Colors & Shapes', 'easy'),
    ('What does "HTML" stand for?', ['Hyper Text Markup Language', 'High Tech Modern Language',
                                     'Hyper Transfer Markup Logic', 'Home Tool Markup Language'], 0, 'Technology', 'medium'),
    ('What does "CPU" stand for?', ['Central Processing Unit', 'Computer Personal Unit',
                                    'Central Program Utility', 'Core Processing Unit'], 0, 'Technology', 'medium'),
]


def seed_question_bank(questions=None) -> int:
    """Insert sample questions whose text is not in the bank yet; returns how many were added."""
    existing = {text for (text,) in db.session.query(Question.question_text).all()}
    added = 0
    for text, options, correct, category, difficulty in (questions or SAMPLE_QUESTIONS):
        if text in existing:
            continue
        db.session.add(Question(
            question_text=text,
            options=json.dumps(options),
            correct_answer=correct,
            category=category,
            difficulty=difficulty,
        ))
        existing.add(text)
        added += 1
    db.session.commit()
    return added
